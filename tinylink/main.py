"""Main application module.

This module builds the FastAPI application, includes routes,
and configures middleware, exception handlers and the storage client lifecycle.
"""

import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tinylink.api import api_router
from tinylink.core.access_log import setup_access_logging
from tinylink.core.config import settings
from tinylink.core.logging import setup_logging
from tinylink.db.base import Database
from tinylink.middleware.logging import RequestLoggingMiddleware

# Setup logging
logger = setup_logging()


def format_validation_errors(exc: RequestValidationError) -> list:
    """Flatten pydantic errors into 'field: message' strings."""
    messages = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(location)
        message = error.get("msg", "Invalid value")
        messages.append(f"{field}: {message}" if field else message)
    return messages


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """Create the application.

    Args:
        database_url: Storage connection string, defaults to settings.DATABASE_URL

    Returns:
        FastAPI: The configured application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        logger.info(f"Environment: {settings.ENVIRONMENT.value}")
        logger.info(f"Debug mode: {settings.DEBUG}")

        setup_access_logging()

        database = Database(database_url)
        if settings.DB_CREATE_TABLES:
            await database.create_tables()
        app.state.database = database
        logger.info(f"Storage backend: {database.backend}")

        try:
            yield
        finally:
            logger.info(f"Shutting down {settings.APP_NAME}")
            await database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.REQUEST_LOGGING_ENABLED:
        app.add_middleware(RequestLoggingMiddleware)
    else:
        logger.info("Request logging is disabled in settings")

    # Include API router
    app.include_router(api_router)

    # Add exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Report malformed request bodies as 400 with every problem found."""
        errors = format_validation_errors(exc)
        logger.info(f"Request validation error on {request.method} {request.url.path}: {errors}")
        return JSONResponse(
            status_code=400,
            content={"errors": errors}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler to catch and log all unhandled exceptions."""
        error_id = f"error-{time.time()}"
        error_location = f"{request.method} {request.url.path}"

        logger.bind(
            error_id=error_id,
            url=str(request.url),
            method=request.method,
            path_params=request.path_params,
            client_host=request.client.host if request.client else None
        ).opt(exception=exc).error(f"Unhandled exception in {error_location}")

        content = {
            "error": "Internal server error",
            "error_id": error_id,
        }
        if settings.DEBUG:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    uvicorn.run(
        "tinylink.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,  # Logging is routed through loguru
    )


if __name__ == "__main__":
    run()
