"""Booking model — reservations over a half-open [check_in, check_out) interval."""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.database import MONEY_DIGITS, MONEY_PLACES, Base, TimestampMixin, UUIDPrimaryKeyMixin

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
BOOKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED, STATUS_COMPLETED)

# Bookings in these states hold the dates and may not overlap.
BLOCKING_STATUSES = (STATUS_PENDING, STATUS_CONFIRMED)


class Booking(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A guest's reservation of a property.

    ``check_in`` and ``check_out`` are naive UTC instants.
    """

    __tablename__ = "bookings"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    guest_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    check_in: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    check_out: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    guests_count: Mapped[int] = mapped_column(Integer, nullable=False)
    rental_type: Mapped[str] = mapped_column(String(32), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(MONEY_DIGITS, MONEY_PLACES), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default=STATUS_PENDING, nullable=False, index=True)
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (Index("ix_bookings_property_dates", "property_id", "check_in", "check_out"),)

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, property_id={self.property_id}, guest_id={self.guest_id}, status={self.status})>"
        )


# Storage-level no-overlap guarantee; the service check only gives a friendlier error first.
Booking.__table__.append_constraint(
    ExcludeConstraint(
        (Booking.__table__.c.property_id, "="),
        (func.tsrange(Booking.__table__.c.check_in, Booking.__table__.c.check_out), "&&"),
        name="ex_bookings_no_overlap",
        using="gist",
        where=Booking.__table__.c.status.in_(BLOCKING_STATUSES),
    ).ddl_if(dialect="postgresql")
)
