"""Supervision routes — hosts delegating property management."""

import uuid

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_context, get_db
from app.auth.context import AuthContext
from app.schemas.auth import MessageResponse
from app.schemas.supervision import SupervisionCreate, SupervisionResponse
from app.services import supervision_service

router = APIRouter(prefix="/api/v1/supervisions", tags=["supervisions"])


@router.post("", response_model=SupervisionResponse, status_code=status.HTTP_201_CREATED)
async def assign_supervisor(
    body: SupervisionCreate,
    response: Response,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> SupervisionResponse:
    """Assign a supervisor by phone number.

    Returns 201 for a new link and 200 when an existing link was reused.
    """
    supervision, created = await supervision_service.assign_supervisor(
        db, ctx, body.property_id, body.phone_number, body.notes
    )
    if not created:
        response.status_code = status.HTTP_200_OK
    return SupervisionResponse.model_validate(supervision)


@router.get("", response_model=list[SupervisionResponse])
async def list_supervisions(
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[SupervisionResponse]:
    """Links where the caller supervises or assigned the supervisor."""
    supervisions = await supervision_service.list_supervisions(db, ctx)
    return [SupervisionResponse.model_validate(s) for s in supervisions]


@router.delete("/{supervision_id}", response_model=MessageResponse)
async def revoke_supervision(
    supervision_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    ctx: AuthContext = Depends(get_auth_context),
) -> MessageResponse:
    await supervision_service.revoke_supervision(db, ctx, supervision_id)
    return MessageResponse(message="Supervision removed")
