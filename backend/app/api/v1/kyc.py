"""Identity verification (KYC) routes."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_context, get_db
from app.auth.context import AuthContext
from app.schemas.auth import MessageResponse
from app.schemas.verification import (
    VerificationDecision,
    VerificationResponse,
    VerificationSubmit,
)
from app.services import verification_service

router = APIRouter(prefix="/api/v1/kyc", tags=["kyc"])


# ---------------------------------------------------------------------------
# Applicant
# ---------------------------------------------------------------------------


@router.post("/submit", response_model=VerificationResponse, status_code=status.HTTP_201_CREATED)
async def submit_verification(
    body: VerificationSubmit,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> VerificationResponse:
    """File a verification request. Only one may be pending per user."""
    request = await verification_service.submit(db, ctx, body.document_urls, body.note)
    return VerificationResponse.model_validate(request)


@router.get("/mine", response_model=VerificationResponse | None)
async def my_verification(
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> VerificationResponse | None:
    """The caller's most recent request, or ``null`` if they never filed one."""
    request = await verification_service.latest_for_user(db, ctx)
    if request is None:
        return None
    return VerificationResponse.model_validate(request)


# ---------------------------------------------------------------------------
# Reviewer (admin)
# ---------------------------------------------------------------------------


@router.get("/pending", response_model=list[VerificationResponse])
async def list_pending(
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[VerificationResponse]:
    requests = await verification_service.list_pending(db, ctx)
    return [VerificationResponse.model_validate(r) for r in requests]


@router.get("/{request_id}", response_model=VerificationResponse)
async def get_verification(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> VerificationResponse:
    request = await verification_service.get_request(db, ctx, request_id)
    return VerificationResponse.model_validate(request)


@router.patch("/{request_id}/approve", response_model=VerificationResponse)
async def approve_verification(
    request_id: uuid.UUID,
    body: VerificationDecision | None = None,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> VerificationResponse:
    """Approve a pending request; its user becomes verified."""
    note = body.note if body is not None else None
    request = await verification_service.approve(db, ctx, request_id, note)
    return VerificationResponse.model_validate(request)


@router.patch("/{request_id}/reject", response_model=VerificationResponse)
async def reject_verification(
    request_id: uuid.UUID,
    body: VerificationDecision | None = None,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> VerificationResponse:
    note = body.note if body is not None else None
    request = await verification_service.reject(db, ctx, request_id, note)
    return VerificationResponse.model_validate(request)


@router.delete("/{request_id}", response_model=MessageResponse)
async def withdraw_verification(
    request_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> MessageResponse:
    """Delete a request. Withdrawing an approved request un-verifies its user."""
    reverted = await verification_service.withdraw(db, ctx, request_id)
    message = "Verification withdrawn; user is no longer verified" if reverted else "Verification request deleted"
    return MessageResponse(message=message)
