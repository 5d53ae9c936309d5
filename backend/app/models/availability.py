"""Manual per-day availability overrides layered over booking occupancy."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import MONEY_DIGITS, MONEY_PLACES, Base, UUIDPrimaryKeyMixin


class AvailabilityOverride(UUIDPrimaryKeyMixin, Base):
    """A host-authored flag for one calendar day of one property.

    A row with ``available=True`` always carries a ``price_override``; an
    available day without a price is represented by the absence of a row.
    """

    __tablename__ = "availability_overrides"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    day: Mapped[date] = mapped_column(Date, nullable=False)
    available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    price_override: Mapped[Decimal | None] = mapped_column(Numeric(MONEY_DIGITS, MONEY_PLACES), nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (UniqueConstraint("property_id", "day", name="uq_availability_overrides_property_day"),)

    def __repr__(self) -> str:
        return f"<AvailabilityOverride(property_id={self.property_id}, day={self.day}, available={self.available})>"
