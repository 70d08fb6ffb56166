"""Link redirection endpoint with click tracking."""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from tinylink.api.dependencies import get_link_service
from tinylink.db.session import get_db
from tinylink.services.links import LinkService
from tinylink.services.exceptions import (
    LinkNotFoundError,
    LinkValidationError,
    ServiceError,
    StorageError,
)
from tinylink.core.decorators import log_link_access_decorator

# Create router with tags
router = APIRouter(tags=["redirect"])


@router.get(
    "/{code}",
    response_class=RedirectResponse,
    status_code=status.HTTP_302_FOUND,
    responses={404: {"description": "Link not found"}}
)
@log_link_access_decorator()
async def redirect_to_original_url(
    request: Request,
    code: str,
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    """Redirect to the original URL and count the visit."""
    try:
        link = await link_service.get_link(db, code)
    except (LinkValidationError, LinkNotFoundError):
        raise HTTPException(status_code=404, detail="Link not found")
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))

    original_url = link.original_url

    # Redirect even when the click cannot be recorded
    try:
        await link_service.record_click(db, link.code)
    except ServiceError as e:
        logger.error("Failed to record click", code=code, error=str(e))

    return RedirectResponse(url=original_url, status_code=status.HTTP_302_FOUND)
