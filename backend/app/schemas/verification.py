"""Schemas for the verification (KYC) workflow."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict


class VerificationSubmit(BaseModel):
    # Emptiness is reported by the service as a 400 with a readable message.
    document_urls: list[str]
    note: str | None = None


class VerificationDecision(BaseModel):
    note: str | None = None


class VerificationResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    status: str
    document_urls: list[str]
    note: str | None = None
    reviewed_by_id: uuid.UUID | None = None
    reviewed_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
