"""Catalog lookups and the host/supervisor permission check."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import AuthContext
from app.config import settings
from app.exceptions import ForbiddenError, NotFoundError
from app.models.property import Property
from app.models.supervision import Supervision
from app.models.user import ROLE_HOST
from app.services.role_service import grant_role

logger = logging.getLogger(__name__)


async def get_property_or_404(db: AsyncSession, property_id: uuid.UUID) -> Property:
    result = await db.execute(select(Property).where(Property.id == property_id))
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFoundError("Property")
    return prop


async def is_active_supervisor(db: AsyncSession, property_id: uuid.UUID, user_id: uuid.UUID) -> bool:
    result = await db.execute(
        select(Supervision.id).where(
            Supervision.property_id == property_id,
            Supervision.supervisor_id == user_id,
            Supervision.active.is_(True),
        )
    )
    return result.first() is not None


async def ensure_can_manage(db: AsyncSession, prop: Property, ctx: AuthContext) -> None:
    """Allow the property's host or one of its active supervisors; raise 403 otherwise."""
    if prop.host_id == ctx.subject_id:
        return
    if await is_active_supervisor(db, prop.id, ctx.subject_id):
        return
    logger.warning("User %s denied management access to property %s", ctx.subject_id, prop.id)
    raise ForbiddenError("Only the host or an active supervisor can manage this property")


def ensure_owner(prop: Property, ctx: AuthContext) -> None:
    if prop.host_id != ctx.subject_id:
        raise ForbiddenError("Only the host can modify this property")


async def create_property(db: AsyncSession, ctx: AuthContext, data: dict) -> Property:
    """Create a listing for the caller and make sure they hold the host role."""
    data = dict(data)
    if not data.get("country"):
        data["country"] = settings.default_country

    prop = Property(host_id=ctx.subject_id, **data)
    db.add(prop)
    await db.flush()

    await grant_role(db, ctx.subject_id, ROLE_HOST)

    await db.refresh(prop)
    logger.info("User %s listed property %s (%s)", ctx.subject_id, prop.id, prop.rental_type)
    return prop


async def update_property(db: AsyncSession, ctx: AuthContext, property_id: uuid.UUID, changes: dict) -> Property:
    prop = await get_property_or_404(db, property_id)
    ensure_owner(prop, ctx)

    columns = Property.__table__.c
    for field, value in changes.items():
        # Required columns can be replaced but not cleared.
        if value is None and not columns[field].nullable:
            continue
        setattr(prop, field, value)

    await db.flush()
    await db.refresh(prop)
    return prop


async def deactivate_property(db: AsyncSession, ctx: AuthContext, property_id: uuid.UUID) -> Property:
    """Soft-delete: the listing disappears from the catalog but keeps its history."""
    prop = await get_property_or_404(db, property_id)
    ensure_owner(prop, ctx)

    prop.active = False
    await db.flush()
    await db.refresh(prop)
    logger.info("Property %s deactivated by %s", prop.id, ctx.subject_id)
    return prop
