"""
Loguru setup for TinyLink.

Loguru is the only logging backend. Records written through the standard
``logging`` module (SQLAlchemy, uvicorn, the service layer) are forwarded
to it by ``InterceptHandler``.
"""

import logging
import os
import sys

from loguru import logger

from tinylink.core.config import settings

# Between INFO (20) and WARNING (30)
REQUEST_LEVEL_NO = 25


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip the logging module's own frames
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def register_request_level() -> None:
    """Register the custom REQUEST level once."""
    try:
        logger.level("REQUEST")
    except ValueError:
        logger.level("REQUEST", no=REQUEST_LEVEL_NO, color="<green>")


def _add_file_sink(level: str) -> None:
    os.makedirs(settings.LOG_DIR, exist_ok=True)
    sink_options = {
        "level": level,
        "rotation": settings.LOG_ROTATION,
        "retention": settings.LOG_RETENTION,
        "compression": "gz",
    }
    if settings.LOG_JSON:
        sink_options["serialize"] = True
    else:
        sink_options["format"] = settings.LOG_FORMAT
    logger.add(os.path.join(settings.LOG_DIR, settings.LOG_FILENAME), **sink_options)


def _route_stdlib_logging() -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Loggers created before this point keep their own handlers otherwise
    for name in list(logging.root.manager.loggerDict):
        existing = logging.getLogger(name)
        existing.handlers = []
        existing.propagate = True

    # uvicorn configures these itself when it starts
    for name in ("uvicorn", "uvicorn.access", "uvicorn.error", "fastapi"):
        server_logger = logging.getLogger(name)
        server_logger.handlers = [InterceptHandler()]
        server_logger.propagate = False

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.DB_ECHO else logging.WARNING
    )


def setup_logging():
    """
    Install the loguru sinks and route stdlib logging through them.

    A stderr sink is always present. A rotating file sink, JSON by default,
    is added when ``LOG_TO_FILE`` is set. Safe to call more than once.

    Returns:
        The configured loguru logger
    """
    level = settings.LOG_LEVEL.upper()

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=settings.LOG_FORMAT,
        backtrace=settings.DEBUG,
        diagnose=settings.DEBUG,
    )
    if settings.LOG_TO_FILE:
        _add_file_sink(level)

    register_request_level()
    _route_stdlib_logging()

    return logger
