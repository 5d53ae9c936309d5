"""User model and per-user role rows."""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base, TimestampMixin, UUIDPrimaryKeyMixin

ROLE_GUEST = "guest"
ROLE_HOST = "host"
ROLE_SUPERVISOR = "supervisor"
ROLE_ADMIN = "admin"
ROLES = (ROLE_GUEST, ROLE_HOST, ROLE_SUPERVISOR, ROLE_ADMIN)


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A marketplace member, identified by phone number."""

    __tablename__ = "users"

    phone_number: Mapped[str] = mapped_column(String(32), unique=True, index=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    # Only the verification workflow writes this flag.
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} phone_number={self.phone_number!r} verified={self.verified}>"


class UserRole(UUIDPrimaryKeyMixin, Base):
    """One capability held by a user. Revoked roles are deactivated, never deleted."""

    __tablename__ = "user_roles"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[str] = mapped_column(String(32), nullable=False)  # guest, host, supervisor, admin
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    __table_args__ = (UniqueConstraint("user_id", "role", name="uq_user_roles_user_role"),)

    def __repr__(self) -> str:
        return f"<UserRole(user_id={self.user_id}, role={self.role!r}, active={self.active})>"
