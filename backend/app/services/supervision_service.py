"""Hosts delegating per-property management to other users."""

import logging
import uuid

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import AuthContext
from app.database import flush_or_conflict
from app.exceptions import ForbiddenError, NotFoundError, ValidationError
from app.models.supervision import Supervision
from app.models.user import ROLE_SUPERVISOR, User
from app.services.property_service import ensure_owner, get_property_or_404
from app.services.role_service import grant_role

logger = logging.getLogger(__name__)


async def assign_supervisor(
    db: AsyncSession,
    ctx: AuthContext,
    property_id: uuid.UUID,
    phone_number: str,
    notes: str | None = None,
) -> tuple[Supervision, bool]:
    """Make the user owning ``phone_number`` a supervisor of the property.

    Idempotent: an existing link for (property, supervisor) is reactivated and
    returned instead of duplicated.

    Returns:
        ``(supervision, created)``.
    """
    prop = await get_property_or_404(db, property_id)
    ensure_owner(prop, ctx)

    result = await db.execute(select(User).where(User.phone_number == phone_number))
    target = result.scalar_one_or_none()
    if target is None:
        raise NotFoundError("User")
    if target.id == prop.host_id:
        raise ValidationError("The host already manages this property")

    await grant_role(db, target.id, ROLE_SUPERVISOR)

    result = await db.execute(
        select(Supervision).where(
            Supervision.property_id == prop.id,
            Supervision.supervisor_id == target.id,
        )
    )
    supervision = result.scalar_one_or_none()
    created = supervision is None

    if created:
        supervision = Supervision(
            property_id=prop.id,
            supervisor_id=target.id,
            assigned_by_id=ctx.subject_id,
            notes=notes,
        )
        db.add(supervision)
    else:
        supervision.active = True
        if notes is not None:
            supervision.notes = notes

    await flush_or_conflict(db, "This user already supervises the property")
    await db.refresh(supervision)

    logger.info(
        "User %s %s supervisor of property %s by %s",
        target.id,
        "assigned" if created else "confirmed as",
        prop.id,
        ctx.subject_id,
    )
    return supervision, created


async def revoke_supervision(db: AsyncSession, ctx: AuthContext, supervision_id: uuid.UUID) -> None:
    """Remove a supervision link. Only the user who assigned it may do so.

    The supervisor role itself stays, since the user may supervise other properties.
    """
    result = await db.execute(select(Supervision).where(Supervision.id == supervision_id))
    supervision = result.scalar_one_or_none()
    if supervision is None:
        raise NotFoundError("Supervision")
    if supervision.assigned_by_id != ctx.subject_id:
        raise ForbiddenError("Only the user who assigned this supervisor can remove them")

    await db.delete(supervision)
    await db.flush()
    logger.info("Supervision %s revoked by %s", supervision_id, ctx.subject_id)


async def list_supervisions(db: AsyncSession, ctx: AuthContext) -> list[Supervision]:
    """Links where the caller is the supervisor or the assigner, newest first."""
    result = await db.execute(
        select(Supervision)
        .where(
            or_(
                Supervision.supervisor_id == ctx.subject_id,
                Supervision.assigned_by_id == ctx.subject_id,
            )
        )
        .order_by(Supervision.created_at.desc())
    )
    return list(result.scalars().all())
