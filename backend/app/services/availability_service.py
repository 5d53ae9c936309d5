"""Availability calendar and manual per-day overrides.

The calendar for ``[start, end)`` is built from two layers:

1. occupancy derived from bookings in a blocking status, with each booking's
   bounds truncated to whole UTC days (day ``d`` is booked when
   ``check_in.date() <= d < check_out.date()``);
2. manual :class:`AvailabilityOverride` rows (blocked days and price overrides).

A booked day is always reported as ``booked`` even if an override blocks it too.
"""

import logging
import uuid
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import AuthContext
from app.config import settings
from app.database import flush_or_conflict
from app.exceptions import ValidationError
from app.models.availability import AvailabilityOverride
from app.models.booking import BLOCKING_STATUSES, Booking
from app.services.property_service import ensure_can_manage, get_property_or_404

logger = logging.getLogger(__name__)

REASON_BOOKED = "booked"
REASON_BLOCKED = "blocked"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def iter_days(start: date, end: date) -> Iterable[date]:
    day = start
    while day < end:
        yield day
        day += timedelta(days=1)


def resolve_window(start: date | None, end: date | None) -> tuple[date, date]:
    """Apply the default window and validate ``start < end`` and the maximum length."""
    if start is None:
        start = utc_today()
    if end is None:
        end = start + timedelta(days=settings.availability_default_days)

    if end <= start:
        raise ValidationError("'to' must be after 'from'")
    if (end - start).days > settings.availability_max_days:
        raise ValidationError(f"Date range cannot exceed {settings.availability_max_days} days")
    return start, end


def build_calendar(
    start: date,
    end: date,
    booked_ranges: Iterable[tuple[datetime, datetime]],
    overrides: Iterable[AvailabilityOverride],
) -> list[dict]:
    """Merge booking occupancy and overrides into one entry per day of ``[start, end)``."""
    day_ranges = [(ci.date(), co.date()) for ci, co in booked_ranges]
    by_day = {o.day: o for o in overrides}

    days = []
    for day in iter_days(start, end):
        booked = any(first <= day < last for first, last in day_ranges)
        override = by_day.get(day)
        blocked = override is not None and not override.available

        if booked:
            reason = REASON_BOOKED
        elif blocked:
            reason = REASON_BLOCKED
        else:
            reason = None

        days.append(
            {
                "date": day,
                "available": reason is None,
                "reason": reason,
                "price_override": override.price_override if override is not None and override.available else None,
            }
        )
    return days


async def get_calendar(
    db: AsyncSession,
    property_id: uuid.UUID,
    start: date | None = None,
    end: date | None = None,
) -> dict:
    """Public day-by-day availability of a property."""
    start, end = resolve_window(start, end)
    prop = await get_property_or_404(db, property_id)

    window_start = datetime.combine(start, time.min)
    window_end = datetime.combine(end, time.min)

    bookings_result = await db.execute(
        select(Booking.check_in, Booking.check_out).where(
            Booking.property_id == prop.id,
            Booking.status.in_(BLOCKING_STATUSES),
            Booking.check_in < window_end,
            Booking.check_out > window_start,
        )
    )
    booked_ranges = [(row.check_in, row.check_out) for row in bookings_result.all()]

    overrides_result = await db.execute(
        select(AvailabilityOverride).where(
            AvailabilityOverride.property_id == prop.id,
            AvailabilityOverride.day >= start,
            AvailabilityOverride.day < end,
        )
    )
    overrides = list(overrides_result.scalars().all())

    return {
        "property_id": prop.id,
        "from": start,
        "to": end,
        "days": build_calendar(start, end, booked_ranges, overrides),
    }


async def bulk_set_overrides(
    db: AsyncSession,
    ctx: AuthContext,
    property_id: uuid.UUID,
    start: date,
    end: date,
    available: bool,
    price_override: Decimal | None = None,
) -> dict:
    """Write one override per day of ``[start, end)`` as a single unit of work.

    ``available=True`` without a price clears the day's override instead of
    storing it, so the day falls back to booking-derived availability.
    """
    start, end = resolve_window(start, end)
    prop = await get_property_or_404(db, property_id)
    await ensure_can_manage(db, prop, ctx)

    result = await db.execute(
        select(AvailabilityOverride).where(
            AvailabilityOverride.property_id == prop.id,
            AvailabilityOverride.day >= start,
            AvailabilityOverride.day < end,
        )
    )
    existing = {o.day: o for o in result.scalars().all()}

    clear = available and price_override is None
    written = cleared = 0
    for day in iter_days(start, end):
        row = existing.get(day)
        if clear:
            if row is not None:
                await db.delete(row)
                cleared += 1
            continue

        if row is None:
            db.add(
                AvailabilityOverride(
                    property_id=prop.id,
                    day=day,
                    available=available,
                    price_override=price_override,
                )
            )
        else:
            row.available = available
            row.price_override = price_override
        written += 1

    await flush_or_conflict(db, "Availability for these dates was changed concurrently")

    logger.info(
        "Overrides on property %s for [%s, %s) by %s: available=%s price=%s written=%d cleared=%d",
        prop.id,
        start,
        end,
        ctx.subject_id,
        available,
        price_override,
        written,
        cleared,
    )
    return {"property_id": prop.id, "from": start, "to": end, "written": written, "cleared": cleared}


async def bulk_clear_overrides(
    db: AsyncSession,
    ctx: AuthContext,
    property_id: uuid.UUID,
    start: date,
    end: date,
) -> dict:
    """Delete every override of the property inside ``[start, end)``."""
    start, end = resolve_window(start, end)
    prop = await get_property_or_404(db, property_id)
    await ensure_can_manage(db, prop, ctx)

    result = await db.execute(
        delete(AvailabilityOverride).where(
            AvailabilityOverride.property_id == prop.id,
            AvailabilityOverride.day >= start,
            AvailabilityOverride.day < end,
        )
    )
    cleared = result.rowcount or 0
    await db.flush()

    logger.info("Cleared %d overrides on property %s for [%s, %s) by %s", cleared, prop.id, start, end, ctx.subject_id)
    return {"property_id": prop.id, "from": start, "to": end, "written": 0, "cleared": cleared}


async def list_overrides(db: AsyncSession, ctx: AuthContext, property_id: uuid.UUID) -> list[AvailabilityOverride]:
    """All override rows of a property, chronological."""
    prop = await get_property_or_404(db, property_id)
    await ensure_can_manage(db, prop, ctx)

    result = await db.execute(
        select(AvailabilityOverride)
        .where(AvailabilityOverride.property_id == prop.id)
        .order_by(AvailabilityOverride.day)
    )
    return list(result.scalars().all())
