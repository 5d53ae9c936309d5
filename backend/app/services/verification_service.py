"""Verification (KYC) workflow.

State machine per request: ``pending -> approved`` or ``pending -> rejected``;
both outcomes are terminal. Approving a request marks its user verified in the
same unit of work; withdrawing an approved request reverts that flag.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import AuthContext
from app.database import flush_or_conflict
from app.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.models.user import User
from app.models.verification import (
    VERIFICATION_APPROVED,
    VERIFICATION_PENDING,
    VERIFICATION_REJECTED,
    VerificationRequest,
)

logger = logging.getLogger(__name__)

PENDING_CONFLICT = "A verification request is already pending"


def _require_reviewer(ctx: AuthContext) -> None:
    if not ctx.is_admin:
        raise ForbiddenError("Admin role required")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def _get_request_or_404(db: AsyncSession, request_id: uuid.UUID) -> VerificationRequest:
    result = await db.execute(select(VerificationRequest).where(VerificationRequest.id == request_id))
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Verification request")
    return request


async def _set_user_verified(db: AsyncSession, user_id: uuid.UUID, verified: bool) -> None:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one()
    user.verified = verified


async def submit(
    db: AsyncSession,
    ctx: AuthContext,
    document_urls: list[str],
    note: str | None = None,
) -> VerificationRequest:
    """File a new request for the caller. Only one may be pending at a time."""
    urls = [url for url in document_urls if url]
    if not urls:
        raise ValidationError("At least one document is required")

    result = await db.execute(
        select(VerificationRequest.id).where(
            VerificationRequest.user_id == ctx.subject_id,
            VerificationRequest.status == VERIFICATION_PENDING,
        )
    )
    if result.first() is not None:
        raise ConflictError(PENDING_CONFLICT)

    request = VerificationRequest(
        user_id=ctx.subject_id,
        status=VERIFICATION_PENDING,
        document_urls=urls,
        note=note or None,
    )
    db.add(request)
    await flush_or_conflict(db, PENDING_CONFLICT)
    await db.refresh(request)

    logger.info("Verification request %s submitted by %s", request.id, ctx.subject_id)
    return request


async def latest_for_user(db: AsyncSession, ctx: AuthContext) -> VerificationRequest | None:
    result = await db.execute(
        select(VerificationRequest)
        .where(VerificationRequest.user_id == ctx.subject_id)
        .order_by(VerificationRequest.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def list_pending(db: AsyncSession, ctx: AuthContext) -> list[VerificationRequest]:
    """Review queue, oldest first."""
    _require_reviewer(ctx)
    result = await db.execute(
        select(VerificationRequest)
        .where(VerificationRequest.status == VERIFICATION_PENDING)
        .order_by(VerificationRequest.created_at.asc())
    )
    return list(result.scalars().all())


async def get_request(db: AsyncSession, ctx: AuthContext, request_id: uuid.UUID) -> VerificationRequest:
    _require_reviewer(ctx)
    return await _get_request_or_404(db, request_id)


async def _decide(
    db: AsyncSession,
    ctx: AuthContext,
    request_id: uuid.UUID,
    outcome: str,
    note: str | None,
) -> VerificationRequest:
    _require_reviewer(ctx)
    request = await _get_request_or_404(db, request_id)
    if request.status != VERIFICATION_PENDING:
        raise ValidationError("Verification request is not pending")

    request.status = outcome
    request.reviewed_by_id = ctx.subject_id
    request.reviewed_at = _utcnow()
    request.note = note or None

    if outcome == VERIFICATION_APPROVED:
        await _set_user_verified(db, request.user_id, True)

    await db.flush()
    await db.refresh(request)

    logger.info("Verification request %s %s by %s", request.id, outcome, ctx.subject_id)
    return request


async def approve(
    db: AsyncSession, ctx: AuthContext, request_id: uuid.UUID, note: str | None = None
) -> VerificationRequest:
    """Approve a pending request and mark its user verified."""
    return await _decide(db, ctx, request_id, VERIFICATION_APPROVED, note)


async def reject(
    db: AsyncSession, ctx: AuthContext, request_id: uuid.UUID, note: str | None = None
) -> VerificationRequest:
    """Reject a pending request. The user's verified flag is left alone."""
    return await _decide(db, ctx, request_id, VERIFICATION_REJECTED, note)


async def withdraw(db: AsyncSession, ctx: AuthContext, request_id: uuid.UUID) -> bool:
    """Delete a request; an approved one also un-verifies its user.

    Returns:
        True if the user's verified flag was reverted.
    """
    _require_reviewer(ctx)
    request = await _get_request_or_404(db, request_id)

    reverted = request.status == VERIFICATION_APPROVED
    if reverted:
        await _set_user_verified(db, request.user_id, False)

    await db.delete(request)
    await db.flush()

    logger.info("Verification request %s withdrawn by %s (verified reverted=%s)", request_id, ctx.subject_id, reverted)
    return reverted
