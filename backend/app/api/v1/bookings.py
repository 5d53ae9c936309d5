"""Bookings API routes — guest reservations and host/supervisor management."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_context, get_db
from app.auth.context import AuthContext
from app.schemas.auth import MessageResponse
from app.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingStatusUpdate,
    BookingUpdate,
)
from app.services import booking_service

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


def _to_list_response(page: dict) -> BookingListResponse:
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in page["items"]],
        total=page["total"],
    )


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a property",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> BookingResponse:
    """Create a pending booking. Returns 409 if the dates clash with another stay."""
    booking = await booking_service.create_booking(
        db,
        ctx,
        property_id=body.property_id,
        check_in=body.check_in,
        check_out=body.check_out,
        guests_count=body.guests_count,
        special_requests=body.special_requests,
    )
    return BookingResponse.model_validate(booking)


@router.get("", response_model=BookingListResponse, summary="List the caller's bookings")
async def list_my_bookings(
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> BookingListResponse:
    page = await booking_service.list_guest_bookings(db, ctx, skip, limit)
    return _to_list_response(page)


@router.get("/received", response_model=BookingListResponse, summary="Bookings on the caller's properties")
async def list_received_bookings(
    status_filter: str | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> BookingListResponse:
    page = await booking_service.list_received_bookings(db, ctx, status_filter, skip, limit)
    return _to_list_response(page)


@router.get("/all", response_model=BookingListResponse, summary="Every booking (admin)")
async def list_all_bookings(
    status_filter: str | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> BookingListResponse:
    page = await booking_service.list_all_bookings(db, ctx, status_filter, skip, limit)
    return _to_list_response(page)


@router.patch("/{booking_id}", response_model=BookingResponse, summary="Modify a booking")
async def modify_booking(
    booking_id: uuid.UUID,
    body: BookingUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> BookingResponse:
    """Guest-side changes. Moving the dates re-checks overlap and re-prices the stay."""
    booking = await booking_service.modify_booking(db, ctx, booking_id, body.model_dump(exclude_unset=True))
    return BookingResponse.model_validate(booking)


@router.patch("/{booking_id}/status", response_model=BookingResponse, summary="Change a booking's status")
async def change_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> BookingResponse:
    """Host or active supervisor of the booked property only."""
    booking = await booking_service.change_status(db, ctx, booking_id, body.status)
    return BookingResponse.model_validate(booking)


@router.delete("/{booking_id}", response_model=MessageResponse, summary="Cancel a booking")
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> MessageResponse:
    await booking_service.cancel_booking(db, ctx, booking_id)
    return MessageResponse(message="Booking cancelled")
