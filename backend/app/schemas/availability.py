"""Schemas for the availability calendar and override management."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.database import MAX_MONEY, MONEY_DIGITS, MONEY_PLACES


class CalendarDay(BaseModel):
    date: date
    available: bool
    reason: str | None = None  # booked, blocked
    price_override: Decimal | None = None


class CalendarResponse(BaseModel):
    """Day-by-day availability of one property over ``[from, to)``."""

    property_id: uuid.UUID
    from_: date = Field(..., alias="from")
    to: date
    days: list[CalendarDay]

    model_config = ConfigDict(populate_by_name=True)


class OverrideBulkRequest(BaseModel):
    """Apply the same override to every day of ``[from, to)``.

    ``available=true`` with no ``price_override`` clears the days instead.
    """

    from_: date = Field(..., alias="from")
    to: date
    available: bool
    price_override: Decimal | None = Field(
        None, ge=0, le=MAX_MONEY, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES
    )

    model_config = ConfigDict(populate_by_name=True)


class OverrideBulkResult(BaseModel):
    property_id: uuid.UUID
    from_: date = Field(..., alias="from")
    to: date
    written: int
    cleared: int

    model_config = ConfigDict(populate_by_name=True)


class OverrideResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    day: date
    available: bool
    price_override: Decimal | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
