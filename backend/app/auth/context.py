"""Explicit caller identity passed into every service operation."""

import uuid
from dataclasses import dataclass, field

from app.models.user import ROLE_ADMIN


@dataclass(frozen=True)
class AuthContext:
    """Who is calling, and which roles they currently hold active."""

    subject_id: uuid.UUID
    roles: frozenset[str] = field(default_factory=frozenset)

    def has_role(self, role: str) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return ROLE_ADMIN in self.roles
