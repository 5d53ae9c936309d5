"""Property model — listings offered by hosts."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import MONEY_DIGITS, MONEY_PLACES, Base, TimestampMixin, UUIDPrimaryKeyMixin

RENTAL_SHORT_TERM = "short_term"
RENTAL_LONG_TERM = "long_term"
RENTAL_TYPES = (RENTAL_SHORT_TERM, RENTAL_LONG_TERM)

PROPERTY_TYPES = ("apartment", "house", "villa", "studio", "room", "event_hall", "office", "land")


class Property(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A rentable listing owned by exactly one host.

    Pricing follows the rental mode: short-term listings are expected to carry
    ``price_per_night`` and long-term listings ``price_per_month``.
    """

    __tablename__ = "properties"

    host_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, default=None)
    property_type: Mapped[str] = mapped_column(String(32), nullable=False)
    rental_type: Mapped[str] = mapped_column(String(32), nullable=False)
    max_guests: Mapped[int] = mapped_column(Integer, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price_per_night: Mapped[Decimal | None] = mapped_column(Numeric(MONEY_DIGITS, MONEY_PLACES), default=None)
    price_per_month: Mapped[Decimal | None] = mapped_column(Numeric(MONEY_DIGITS, MONEY_PLACES), default=None)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    country: Mapped[str] = mapped_column(String(120), nullable=False)
    latitude: Mapped[float | None] = mapped_column(Float, default=None)
    longitude: Mapped[float | None] = mapped_column(Float, default=None)
    images: Mapped[list | None] = mapped_column(JSON, default=list)
    house_rules: Mapped[str | None] = mapped_column(Text, default=None)
    check_in_time: Mapped[str | None] = mapped_column(String(8), default="15:00:00")
    check_out_time: Mapped[str | None] = mapped_column(String(8), default="11:00:00")
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, rental_type={self.rental_type!r})>"
