"""Properties API endpoints: register and look up the properties bills belong to."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentbook.api.auth import Actor, get_actor, require_owner
from rentbook.api.schemas import CreatePropertyRequest, PropertiesResponse, PropertyResponse
from rentbook.errors import AppError, raise_app_error
from rentbook.services.db import get_async_session
from rentbook.services.property_service import PropertyService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/properties", tags=["properties"])


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    payload: CreatePropertyRequest,
    actor: Actor = Depends(get_actor),  # noqa: B008
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> PropertyResponse:
    """Register a property (owner only).

    Raises:
        400: Blank name or malformed property code
        403: Caller is not the owner
        409: Property code already in use
    """
    try:
        require_owner(actor)
        prop = await PropertyService(db).create_property(payload.to_input(), actor_id=actor.actor_id)
        return PropertyResponse.model_validate(prop)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in POST /api/properties: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e


@router.get("", response_model=PropertiesResponse)
async def list_properties(
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> PropertiesResponse:
    """List properties, newest first."""
    try:
        properties = await PropertyService(db).list_properties(include_inactive=include_inactive)
        return PropertiesResponse(properties=[PropertyResponse.model_validate(p) for p in properties])
    except Exception as e:
        logger.error(f"Error in GET /api/properties: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(
    property_id: int,
    db: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> PropertyResponse:
    """Get one property."""
    try:
        prop = await PropertyService(db).get_property(property_id)
        return PropertyResponse.model_validate(prop)
    except AppError as e:
        raise_app_error(e)
    except Exception as e:
        logger.error(f"Error in GET /api/properties/{property_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Server error") from e
