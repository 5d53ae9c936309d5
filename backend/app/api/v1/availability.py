"""Availability calendar routes, nested under a property."""

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_context, get_db
from app.auth.context import AuthContext
from app.schemas.availability import (
    CalendarResponse,
    OverrideBulkRequest,
    OverrideBulkResult,
    OverrideResponse,
)
from app.services import availability_service

router = APIRouter(prefix="/api/v1/properties/{property_id}/availability", tags=["availability"])


@router.get("", response_model=CalendarResponse, response_model_by_alias=True)
async def get_calendar(
    property_id: uuid.UUID,
    start: date | None = Query(None, alias="from"),
    end: date | None = Query(None, alias="to"),
    db: AsyncSession = Depends(get_db),
) -> CalendarResponse:
    """Day-by-day availability over ``[from, to)``. Public.

    Defaults to the next 60 days starting today (UTC).
    """
    calendar = await availability_service.get_calendar(db, property_id, start, end)
    return CalendarResponse.model_validate(calendar)


@router.get("/overrides", response_model=list[OverrideResponse])
async def list_overrides(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[OverrideResponse]:
    """Stored override rows of the property. Host or active supervisor only."""
    overrides = await availability_service.list_overrides(db, ctx, property_id)
    return [OverrideResponse.model_validate(o) for o in overrides]


@router.post("/bulk", response_model=OverrideBulkResult, response_model_by_alias=True)
async def bulk_set(
    property_id: uuid.UUID,
    body: OverrideBulkRequest,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> OverrideBulkResult:
    """Block, unblock or re-price every day of ``[from, to)`` in one go."""
    outcome = await availability_service.bulk_set_overrides(
        db,
        ctx,
        property_id,
        body.from_,
        body.to,
        body.available,
        body.price_override,
    )
    return OverrideBulkResult.model_validate(outcome)


@router.delete("/bulk", response_model=OverrideBulkResult, response_model_by_alias=True)
async def bulk_clear(
    property_id: uuid.UUID,
    start: date = Query(..., alias="from"),
    end: date = Query(..., alias="to"),
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> OverrideBulkResult:
    """Remove every override in ``[from, to)``."""
    outcome = await availability_service.bulk_clear_overrides(db, ctx, property_id, start, end)
    return OverrideBulkResult.model_validate(outcome)
