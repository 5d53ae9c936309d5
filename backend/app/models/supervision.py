"""Supervision model — property-scoped management rights delegated by a host."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, UUIDPrimaryKeyMixin


class Supervision(UUIDPrimaryKeyMixin, Base):
    """Grants ``supervisor_id`` host-equivalent rights over one property's bookings and calendar."""

    __tablename__ = "supervisions"

    property_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    supervisor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_by_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (UniqueConstraint("property_id", "supervisor_id", name="uq_supervisions_property_supervisor"),)

    def __repr__(self) -> str:
        return f"<Supervision(id={self.id}, property_id={self.property_id}, supervisor_id={self.supervisor_id})>"
