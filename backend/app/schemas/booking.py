"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for requesting a reservation.

    Rental type and total amount are derived from the property, never taken
    from the client. Date ordering is checked by the booking service.
    """

    property_id: uuid.UUID
    check_in: datetime
    check_out: datetime
    guests_count: int = Field(..., ge=1)
    special_requests: str | None = None


class BookingUpdate(BaseModel):
    """Guest-side changes to an existing booking. All fields optional."""

    check_in: datetime | None = None
    check_out: datetime | None = None
    guests_count: int | None = Field(None, ge=1)
    special_requests: str | None = None


class BookingStatusUpdate(BaseModel):
    """Host/supervisor status change."""

    status: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response returned from booking operations."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    check_in: datetime
    check_out: datetime
    guests_count: int
    rental_type: str
    total_amount: Decimal
    status: str
    special_requests: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int
