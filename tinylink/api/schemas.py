"""API request and response schemas.

This module contains Pydantic models for API request validation
and response serialization.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class LinkCreateRequest(BaseModel):
    """Request schema for creating a link.

    Accepts ``originalUrl`` as well as ``original_url``.
    """
    model_config = ConfigDict(populate_by_name=True)

    original_url: str = Field(alias="originalUrl", description="The URL to shorten")
    code: Optional[str] = Field(None, description="Optional custom code")


class LinkResponse(BaseModel):
    """Response schema for a link."""
    model_config = ConfigDict(from_attributes=True)

    code: str
    original_url: str
    clicks: int
    last_clicked_at: Optional[datetime] = None
    created_at: datetime


class LinkCreatedResponse(LinkResponse):
    """Response schema for a newly created link."""
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    short_url: str = Field(alias="shortUrl")  # Full URL including base domain


class MessageResponse(BaseModel):
    """Response schema for confirmations."""
    message: str


class ErrorResponse(BaseModel):
    """Response schema for errors."""
    error: str


class ValidationErrorResponse(BaseModel):
    """Response schema for request validation failures."""
    errors: List[str]


class HealthResponse(BaseModel):
    """Response schema for the liveness probe."""
    ok: bool
    version: str
    timestamp: str
    uptime: float
    environment: str


class ReadinessResponse(BaseModel):
    """Response schema for the readiness probe."""
    ready: bool
    components: Dict[str, Dict]
