"""Per-user roles that can be granted and revoked."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import ROLES, UserRole

logger = logging.getLogger(__name__)


async def active_roles(db: AsyncSession, user_id: uuid.UUID) -> set[str]:
    """Return the names of the roles ``user_id`` currently holds active."""
    result = await db.execute(
        select(UserRole.role).where(UserRole.user_id == user_id, UserRole.active.is_(True))
    )
    return set(result.scalars().all())


async def grant_role(db: AsyncSession, user_id: uuid.UUID, role: str) -> UserRole:
    """Give ``role`` to a user, reactivating a previously revoked row. Idempotent."""
    if role not in ROLES:
        raise ValueError(f"Unknown role: {role}")

    result = await db.execute(
        select(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
    )
    assignment = result.scalar_one_or_none()

    if assignment is None:
        assignment = UserRole(user_id=user_id, role=role, active=True)
        db.add(assignment)
        await db.flush()
        logger.info("Granted role %s to user %s", role, user_id)
    elif not assignment.active:
        assignment.active = True
        await db.flush()
        logger.info("Reactivated role %s for user %s", role, user_id)

    return assignment


async def revoke_role(db: AsyncSession, user_id: uuid.UUID, role: str) -> None:
    """Deactivate ``role`` for a user. The row is kept."""
    result = await db.execute(
        select(UserRole).where(UserRole.user_id == user_id, UserRole.role == role)
    )
    assignment = result.scalar_one_or_none()
    if assignment is not None and assignment.active:
        assignment.active = False
        await db.flush()
        logger.info("Revoked role %s from user %s", role, user_id)
