"""Current-user profile routes."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_db
from app.models.user import User
from app.schemas.user import ProfileResponse, ProfileUpdate
from app.services.role_service import active_roles

router = APIRouter(prefix="/api/v1/users", tags=["users"])

# Names cannot be cleared, only replaced.
REQUIRED_FIELDS = {"first_name", "last_name"}


async def _profile(db: AsyncSession, user: User) -> ProfileResponse:
    profile = ProfileResponse.model_validate(user)
    profile.roles = sorted(await active_roles(db, user.id))
    return profile


@router.get("/me", response_model=ProfileResponse)
async def get_me(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    """Return the authenticated user's profile and active roles."""
    return await _profile(db, current_user)


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    """Partially update the authenticated user's profile. Only sent fields change."""
    for field, value in body.model_dump(exclude_unset=True).items():
        if value is None and field in REQUIRED_FIELDS:
            continue
        setattr(current_user, field, value)

    await db.flush()
    await db.refresh(current_user)
    return await _profile(db, current_user)
