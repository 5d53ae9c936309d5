"""Schemas for supervision links."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SupervisionCreate(BaseModel):
    property_id: uuid.UUID
    phone_number: str = Field(..., min_length=1)
    notes: str | None = None


class SupervisionResponse(BaseModel):
    id: uuid.UUID
    property_id: uuid.UUID
    supervisor_id: uuid.UUID
    assigned_by_id: uuid.UUID
    active: bool
    notes: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
