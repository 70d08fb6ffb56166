from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from tinylink.api import schemas
from tinylink.api.dependencies import get_link_service, get_base_url
from tinylink.db.session import get_db
from tinylink.models.link import Link
from tinylink.services.links import LinkService
from tinylink.services.exceptions import (
    CodeAlreadyExistsError,
    LinkNotFoundError,
    LinkValidationError,
    StorageError,
)

router = APIRouter(prefix="/links", tags=["links"])


def to_created_response(link: Link, base_url: str) -> schemas.LinkCreatedResponse:
    return schemas.LinkCreatedResponse(
        code=link.code,
        original_url=link.original_url,
        clicks=link.clicks,
        last_clicked_at=link.last_clicked_at,
        created_at=link.created_at,
        short_url=f"{base_url}/{link.code}",
    )


@router.get(
    "",
    response_model=List[schemas.LinkResponse],
    responses={500: {"model": schemas.ErrorResponse}}
)
async def list_links(
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    try:
        links = await link_service.list_links(db)
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return [schemas.LinkResponse.model_validate(link) for link in links]


@router.post(
    "",
    response_model=schemas.LinkCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Invalid URL or code"},
        409: {"model": schemas.ErrorResponse, "description": "Code already exists"},
        500: {"model": schemas.ErrorResponse},
    }
)
async def create_link(
    link_data: schemas.LinkCreateRequest,
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
    base_url: str = Depends(get_base_url)
):
    try:
        link = await link_service.create_link(
            db=db,
            original_url=link_data.original_url,
            code=link_data.code,
        )
    except LinkValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CodeAlreadyExistsError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StorageError as e:
        logger.error("Link creation failed", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to create link")
    return to_created_response(link, base_url)


@router.get(
    "/{code}",
    response_model=schemas.LinkResponse,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Malformed code"},
        404: {"model": schemas.ErrorResponse, "description": "Link not found"},
        500: {"model": schemas.ErrorResponse},
    }
)
async def get_link(
    code: str = Path(..., description="The code of the link"),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    try:
        link = await link_service.get_link(db, code)
    except LinkValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LinkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return schemas.LinkResponse.model_validate(link)


@router.delete(
    "/{code}",
    response_model=schemas.MessageResponse,
    responses={
        400: {"model": schemas.ErrorResponse, "description": "Malformed code"},
        404: {"model": schemas.ErrorResponse, "description": "Link not found"},
        500: {"model": schemas.ErrorResponse},
    }
)
async def delete_link(
    code: str = Path(..., description="The code of the link"),
    db: AsyncSession = Depends(get_db),
    link_service: LinkService = Depends(get_link_service),
):
    try:
        await link_service.delete_link(db, code)
    except LinkValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LinkNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return schemas.MessageResponse(message="Link deleted successfully")
