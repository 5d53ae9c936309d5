"""Properties API routes — public catalog plus host-scoped management."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_context, get_db, get_optional_user
from app.auth.context import AuthContext
from app.exceptions import NotFoundError
from app.models.property import Property
from app.models.user import User
from app.schemas.auth import MessageResponse
from app.schemas.property import (
    PropertyCreate,
    PropertyListResponse,
    PropertyResponse,
    PropertyUpdate,
)
from app.services import property_service

router = APIRouter(prefix="/api/v1/properties", tags=["properties"])


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new listing",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> PropertyResponse:
    """Create a listing owned by the caller. The caller becomes a host."""
    prop = await property_service.create_property(db, ctx, body.model_dump())
    return PropertyResponse.model_validate(prop)


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="Browse active listings",
)
async def list_properties(
    city: str | None = Query(None),
    property_type: str | None = Query(None),
    rental_type: str | None = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
) -> PropertyListResponse:
    """Public catalog. Inactive listings are never included."""
    filters = [Property.active.is_(True)]
    if city is not None:
        filters.append(func.lower(Property.city) == city.lower())
    if property_type is not None:
        filters.append(Property.property_type == property_type)
    if rental_type is not None:
        filters.append(Property.rental_type == rental_type)

    # Total count
    count_query = select(func.count()).select_from(Property).where(*filters)
    total = (await db.execute(count_query)).scalar_one()

    # Fetch page
    items_query = select(Property).where(*filters).order_by(Property.created_at.desc()).offset(skip).limit(limit)
    result = await db.execute(items_query)
    items = list(result.scalars().all())

    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=total,
    )


@router.get(
    "/mine",
    response_model=PropertyListResponse,
    summary="List the caller's own listings",
)
async def list_my_properties(
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> PropertyListResponse:
    """Every listing the caller hosts, active or not."""
    result = await db.execute(
        select(Property).where(Property.host_id == ctx.subject_id).order_by(Property.created_at.desc())
    )
    items = list(result.scalars().all())
    return PropertyListResponse(
        items=[PropertyResponse.model_validate(p) for p in items],
        total=len(items),
    )


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a listing by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User | None = Depends(get_optional_user),
) -> PropertyResponse:
    """Retrieve a single listing. An inactive listing is visible only to its host."""
    prop = await property_service.get_property_or_404(db, property_id)
    if not prop.active and (current_user is None or current_user.id != prop.host_id):
        raise NotFoundError("Property")
    return PropertyResponse.model_validate(prop)


@router.patch(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a listing",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> PropertyResponse:
    """Partially update a listing. Only explicitly set fields are changed."""
    prop = await property_service.update_property(db, ctx, property_id, body.model_dump(exclude_unset=True))
    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    summary="Deactivate a listing",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> MessageResponse:
    """Soft-delete a listing. Its bookings and calendar are kept."""
    await property_service.deactivate_property(db, ctx, property_id)
    return MessageResponse(message="Property deactivated")
