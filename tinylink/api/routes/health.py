"""Health check endpoints for monitoring application status."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from tinylink.api import schemas
from tinylink.core.config import settings
from tinylink.db.base import Database
from tinylink.db.session import get_database

router = APIRouter(tags=["health"])

# Process start, reported as uptime by the liveness probe
STARTED_AT = time.monotonic()


@router.get(
    "/healthz",
    response_model=schemas.HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness",
    response_description="Process is up"
)
async def liveness_probe():
    """Report that the process is serving requests."""
    return schemas.HealthResponse(
        ok=True,
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        uptime=round(time.monotonic() - STARTED_AT, 3),
        environment=settings.ENVIRONMENT.value,
    )


@router.get(
    "/health/ready",
    response_model=schemas.ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness",
    response_description="Storage reachability"
)
async def readiness_probe(database: Database = Depends(get_database)):
    """Check if application is ready to handle requests."""
    db_status = await database.check_connection()
    return schemas.ReadinessResponse(
        ready=db_status["status"] == "healthy",
        components={"database": db_status},
    )
