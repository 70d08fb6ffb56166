"""HTTP middleware for the TinyLink application."""

from tinylink.middleware.logging import RequestLoggingMiddleware, request_id_var

__all__ = ["RequestLoggingMiddleware", "request_id_var"]
