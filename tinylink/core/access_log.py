"""Link access logging using Loguru's built-in async features."""

from loguru import logger
import os
from datetime import datetime, timezone

from tinylink.core.config import settings

EVENT_TYPE = "link_access"

# Bound logger for link access events, created on first use
access_logger = None


def _is_access_event(record) -> bool:
    return record["extra"].get("event_type") == EVENT_TYPE


def setup_access_logging():
    """Configure the link access logger.

    Access events always reach the application sinks. When file logging is
    enabled they are additionally written to dedicated files through
    Loguru's internal queue so redirects never wait on disk I/O.
    """
    global access_logger

    access_logger = logger.bind(event_type=EVENT_TYPE)

    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        logger.add(
            f"{settings.LOG_DIR}/link_access.log",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | IP:{extra[ip]} | Code:{extra[code]} | {message}",
            rotation=settings.LOG_ROTATION,
            retention=settings.LOG_RETENTION,
            enqueue=True,  # This enables Loguru's internal queue
            level="INFO",
            backtrace=False,
            diagnose=False,
            filter=_is_access_event,
        )
        logger.add(
            f"{settings.LOG_DIR}/link_access.json",
            serialize=True,
            enqueue=True,
            level="INFO",
            filter=_is_access_event,
        )

    return access_logger


def log_link_access(code: str, ip_address: str, user_agent: str = "", status_code: int = 302):
    """
    Log a link access event.

    Args:
        code: The short code that was requested
        ip_address: The client's IP address
        user_agent: Optional user agent string
        status_code: HTTP status returned for the access
    """
    if access_logger is None:
        setup_access_logging()

    access_logger.bind(
        ip=ip_address,
        code=code,
        user_agent=user_agent,
        status_code=status_code,
        timestamp=datetime.now(timezone.utc).isoformat()
    ).info(f"Link accessed: {code}")
