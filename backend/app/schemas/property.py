"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from app.database import MAX_MONEY, MONEY_DIGITS, MONEY_PLACES
from app.models.property import PROPERTY_TYPES, RENTAL_TYPES

PROPERTY_TYPE_PATTERN = f"^({'|'.join(PROPERTY_TYPES)})$"
RENTAL_TYPE_PATTERN = f"^({'|'.join(RENTAL_TYPES)})$"
TIME_PATTERN = r"^\d{2}:\d{2}(:\d{2})?$"

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for creating a new listing."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    property_type: str = Field(..., pattern=PROPERTY_TYPE_PATTERN)
    rental_type: str = Field(..., pattern=RENTAL_TYPE_PATTERN)
    max_guests: int = Field(..., ge=1)
    bedrooms: int = Field(0, ge=0)
    bathrooms: int = Field(0, ge=0)
    price_per_night: Decimal | None = Field(
        None, ge=0, le=MAX_MONEY, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES
    )
    price_per_month: Decimal | None = Field(
        None, ge=0, le=MAX_MONEY, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES
    )
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    country: str | None = Field(None, max_length=120)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    images: list[str] = []
    house_rules: str | None = None
    check_in_time: str | None = Field("15:00:00", pattern=TIME_PATTERN)
    check_out_time: str | None = Field("11:00:00", pattern=TIME_PATTERN)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a listing. All fields optional."""

    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    property_type: str | None = Field(None, pattern=PROPERTY_TYPE_PATTERN)
    rental_type: str | None = Field(None, pattern=RENTAL_TYPE_PATTERN)
    max_guests: int | None = Field(None, ge=1)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    price_per_night: Decimal | None = Field(
        None, ge=0, le=MAX_MONEY, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES
    )
    price_per_month: Decimal | None = Field(
        None, ge=0, le=MAX_MONEY, max_digits=MONEY_DIGITS, decimal_places=MONEY_PLACES
    )
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=120)
    country: str | None = Field(None, max_length=120)
    latitude: float | None = Field(None, ge=-90, le=90)
    longitude: float | None = Field(None, ge=-180, le=180)
    images: list[str] | None = None
    house_rules: str | None = None
    check_in_time: str | None = Field(None, pattern=TIME_PATTERN)
    check_out_time: str | None = Field(None, pattern=TIME_PATTERN)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Listing information returned from the API."""

    id: uuid.UUID
    host_id: uuid.UUID
    title: str
    description: str | None = None
    property_type: str
    rental_type: str
    max_guests: int
    bedrooms: int
    bathrooms: int
    price_per_night: Decimal | None = None
    price_per_month: Decimal | None = None
    address: str
    city: str
    country: str
    latitude: float | None = None
    longitude: float | None = None
    images: list | None = None
    house_rules: str | None = None
    check_in_time: str | None = None
    check_out_time: str | None = None
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PropertyListResponse(BaseModel):
    """Paginated list of listings."""

    items: list[PropertyResponse]
    total: int
