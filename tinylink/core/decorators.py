"""Route handler decorators."""

import functools

from fastapi import Request

from tinylink.core.access_log import log_link_access
from tinylink.middleware.logging import client_ip


def log_link_access_decorator():
    """Record a link access event once the wrapped redirect handler succeeds.

    Requests for unknown or malformed codes raise inside the handler and are
    not recorded. The wrapped handler must take ``request`` and ``code``
    keyword arguments; its signature is kept intact for FastAPI's dependency
    resolution.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, request: Request, code: str, **kwargs):
            response = await func(*args, request=request, code=code, **kwargs)
            log_link_access(
                code=code,
                ip_address=client_ip(request),
                user_agent=request.headers.get("user-agent", ""),
                status_code=response.status_code,
            )
            return response
        return wrapper
    return decorator
