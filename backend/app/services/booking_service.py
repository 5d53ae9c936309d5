"""Booking engine — reservations, overlap prevention, and pricing.

Overlap rule: two bookings on the same property conflict when both are in a
blocking status (pending, confirmed) and their half-open intervals intersect,
i.e. ``NOT (a.check_out <= b.check_in OR a.check_in >= b.check_out)``.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import AuthContext
from app.database import MAX_MONEY, flush_or_conflict
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.booking import BLOCKING_STATUSES, BOOKING_STATUSES, STATUS_PENDING, Booking
from app.models.property import RENTAL_LONG_TERM, RENTAL_SHORT_TERM, Property
from app.services.property_service import ensure_can_manage, get_property_or_404

logger = logging.getLogger(__name__)

OVERLAP_DETAIL = "Dates conflict with an existing booking"


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------


def to_naive_utc(value: datetime) -> datetime:
    """Normalise an instant to naive UTC, the representation stored in the database."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def billable_days(check_in: datetime, check_out: datetime) -> int:
    """Whole days charged for ``[check_in, check_out)``; a started day counts as a full one."""
    return math.ceil((check_out - check_in) / timedelta(days=1))


def compute_total_amount(
    rental_type: str,
    price_per_night: Decimal | None,
    price_per_month: Decimal | None,
    check_in: datetime,
    check_out: datetime,
) -> Decimal:
    """Price a stay according to the listing's rental mode.

    Short-term stays cost ``days * price_per_night``; long-term stays cost the
    flat ``price_per_month`` whatever their length.

    Raises:
        ValidationError: ``MISSING_NIGHT_PRICE``, ``MISSING_MONTH_PRICE``,
            ``INVALID_RENTAL_TYPE``, or ``AMOUNT_TOO_LARGE`` when the total
            does not fit a money column.
    """
    if rental_type == RENTAL_SHORT_TERM:
        if price_per_night is None:
            raise ValidationError("The property has no nightly price", code="MISSING_NIGHT_PRICE")
        total = Decimal(billable_days(check_in, check_out)) * Decimal(price_per_night)
    elif rental_type == RENTAL_LONG_TERM:
        if price_per_month is None:
            raise ValidationError("The property has no monthly price", code="MISSING_MONTH_PRICE")
        total = Decimal(price_per_month)
    else:
        raise ValidationError(f"Invalid rental type: {rental_type!r}", code="INVALID_RENTAL_TYPE")

    if total > MAX_MONEY:
        raise ValidationError("The total amount for this stay is too large", code="AMOUNT_TOO_LARGE")
    return total


def price_for_property(prop: Property, check_in: datetime, check_out: datetime) -> Decimal:
    return compute_total_amount(prop.rental_type, prop.price_per_night, prop.price_per_month, check_in, check_out)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate_interval(check_in: datetime | None, check_out: datetime | None) -> tuple[datetime, datetime]:
    if check_in is None or check_out is None:
        raise ValidationError("check_in and check_out are required")
    check_in, check_out = to_naive_utc(check_in), to_naive_utc(check_out)
    if check_out <= check_in:
        raise ValidationError("check_out must be after check_in")
    return check_in, check_out


async def find_overlapping(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: datetime,
    check_out: datetime,
    exclude_booking_id: uuid.UUID | None = None,
) -> Booking | None:
    """Return one blocking booking intersecting ``[check_in, check_out)``, if any."""
    query = select(Booking).where(
        Booking.property_id == property_id,
        Booking.status.in_(BLOCKING_STATUSES),
        Booking.check_in < check_out,
        Booking.check_out > check_in,
    )
    if exclude_booking_id is not None:
        query = query.where(Booking.id != exclude_booking_id)

    result = await db.execute(query.limit(1))
    return result.scalar_one_or_none()


async def _ensure_no_overlap(
    db: AsyncSession,
    property_id: uuid.UUID,
    check_in: datetime,
    check_out: datetime,
    exclude_booking_id: uuid.UUID | None = None,
) -> None:
    clash = await find_overlapping(db, property_id, check_in, check_out, exclude_booking_id)
    if clash is not None:
        logger.warning(
            "Rejected booking on property %s for [%s, %s): overlaps booking %s",
            property_id,
            check_in,
            check_out,
            clash.id,
        )
        raise ConflictError(OVERLAP_DETAIL)


async def get_booking_or_404(db: AsyncSession, booking_id: uuid.UUID) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFoundError("Booking")
    return booking


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_booking(
    db: AsyncSession,
    ctx: AuthContext,
    *,
    property_id: uuid.UUID | None,
    check_in: datetime | None,
    check_out: datetime | None,
    guests_count: int | None,
    special_requests: str | None = None,
) -> Booking:
    """Reserve a property for the caller.

    The rental type is always copied from the property, and the total is
    computed server-side.
    """
    check_in, check_out = _validate_interval(check_in, check_out)
    if guests_count is None or guests_count < 1:
        raise ValidationError("guests_count must be a positive integer")
    if property_id is None:
        raise ValidationError("property_id is required")

    prop = await get_property_or_404(db, property_id)
    if not prop.active:
        raise NotFoundError("Property")

    await _ensure_no_overlap(db, prop.id, check_in, check_out)
    total_amount = price_for_property(prop, check_in, check_out)

    booking = Booking(
        property_id=prop.id,
        guest_id=ctx.subject_id,
        check_in=check_in,
        check_out=check_out,
        guests_count=guests_count,
        rental_type=prop.rental_type,
        total_amount=total_amount,
        status=STATUS_PENDING,
        special_requests=special_requests,
    )
    db.add(booking)
    await flush_or_conflict(db, OVERLAP_DETAIL)
    await db.refresh(booking)

    logger.info(
        "Booking %s created by %s on property %s for [%s, %s), total %s",
        booking.id,
        ctx.subject_id,
        prop.id,
        check_in,
        check_out,
        total_amount,
    )
    return booking


async def modify_booking(
    db: AsyncSession,
    ctx: AuthContext,
    booking_id: uuid.UUID,
    changes: dict,
) -> Booking:
    """Guest-initiated reschedule or edit.

    ``changes`` holds only the fields the caller sent (``check_in``,
    ``check_out``, ``guests_count``, ``special_requests``). The overlap check
    always re-runs; the price is recomputed only when a date moved.
    """
    booking = await get_booking_or_404(db, booking_id)
    if booking.guest_id != ctx.subject_id:
        raise ForbiddenError("Only the guest who made the booking can modify it")

    new_check_in = changes.get("check_in")
    new_check_out = changes.get("check_out")
    check_in, check_out = _validate_interval(
        new_check_in if new_check_in is not None else booking.check_in,
        new_check_out if new_check_out is not None else booking.check_out,
    )

    if "guests_count" in changes:
        guests_count = changes["guests_count"]
        if guests_count is None or guests_count < 1:
            raise ValidationError("guests_count must be a positive integer")
        booking.guests_count = guests_count
    if "special_requests" in changes:
        booking.special_requests = changes["special_requests"]

    await _ensure_no_overlap(db, booking.property_id, check_in, check_out, exclude_booking_id=booking.id)

    dates_changed = check_in != booking.check_in or check_out != booking.check_out
    if dates_changed:
        prop = await get_property_or_404(db, booking.property_id)
        booking.total_amount = price_for_property(prop, check_in, check_out)
        booking.check_in = check_in
        booking.check_out = check_out

    await flush_or_conflict(db, OVERLAP_DETAIL)
    await db.refresh(booking)

    logger.info("Booking %s modified by guest %s (dates_changed=%s)", booking.id, ctx.subject_id, dates_changed)
    return booking


async def change_status(
    db: AsyncSession,
    ctx: AuthContext,
    booking_id: uuid.UUID,
    new_status: str,
) -> Booking:
    """Set a booking's status. Allowed for the property's host and active supervisors."""
    if new_status not in BOOKING_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(BOOKING_STATUSES)}")

    booking = await get_booking_or_404(db, booking_id)
    prop = await get_property_or_404(db, booking.property_id)
    await ensure_can_manage(db, prop, ctx)

    previous = booking.status
    # Reviving a released booking must not collide with stays taken since.
    if new_status in BLOCKING_STATUSES and previous not in BLOCKING_STATUSES:
        await _ensure_no_overlap(
            db, booking.property_id, booking.check_in, booking.check_out, exclude_booking_id=booking.id
        )
    booking.status = new_status
    await flush_or_conflict(db, OVERLAP_DETAIL)
    await db.refresh(booking)

    logger.info("Booking %s status %s -> %s by %s", booking.id, previous, new_status, ctx.subject_id)
    return booking


async def cancel_booking(db: AsyncSession, ctx: AuthContext, booking_id: uuid.UUID) -> None:
    """Guest cancellation: removes the booking record."""
    booking = await get_booking_or_404(db, booking_id)
    if booking.guest_id != ctx.subject_id:
        raise ForbiddenError("Only the guest who made the booking can cancel it")

    await db.delete(booking)
    await db.flush()
    logger.info("Booking %s cancelled by guest %s", booking_id, ctx.subject_id)


async def _paginate(db: AsyncSession, query, skip: int, limit: int) -> dict:
    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar_one()

    result = await db.execute(query.order_by(Booking.created_at.desc()).offset(skip).limit(limit))
    return {"items": list(result.scalars().all()), "total": total}


async def list_guest_bookings(
    db: AsyncSession, ctx: AuthContext, skip: int = 0, limit: int = 20
) -> dict:
    """The caller's own reservations, newest first."""
    query = select(Booking).where(Booking.guest_id == ctx.subject_id)
    return await _paginate(db, query, skip, limit)


async def list_received_bookings(
    db: AsyncSession,
    ctx: AuthContext,
    status: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> dict:
    """Bookings on properties the caller owns (supervision does not count), newest first."""
    query = (
        select(Booking)
        .join(Property, Booking.property_id == Property.id)
        .where(Property.host_id == ctx.subject_id)
    )
    if status is not None:
        query = query.where(Booking.status == status)
    return await _paginate(db, query, skip, limit)


async def list_all_bookings(
    db: AsyncSession,
    ctx: AuthContext,
    status: str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> dict:
    """Every booking on the platform. Admin only."""
    if not ctx.is_admin:
        raise ForbiddenError("Admin role required")

    query = select(Booking)
    if status is not None:
        query = query.where(Booking.status == status)
    return await _paginate(db, query, skip, limit)
