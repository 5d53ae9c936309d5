"""Auth API router — register, login, refresh."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_db
from app.auth.jwt import REFRESH_TOKEN, create_token_pair, subject_from_token
from app.auth.passwords import hash_password, verify_password
from app.database import flush_or_conflict
from app.exceptions import ConflictError
from app.models.user import ROLE_GUEST, User
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from app.schemas.user import UserResponse
from app.services.role_service import grant_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

PHONE_TAKEN = "Phone number already registered"


# ---------------------------------------------------------------------------
# POST /register
# ---------------------------------------------------------------------------


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Register a new user with phone number and password.

    Every new account starts with the ``guest`` role.
    """
    result = await db.execute(select(User.id).where(User.phone_number == body.phone_number))
    if result.first() is not None:
        raise ConflictError(PHONE_TAKEN)

    user = User(
        phone_number=body.phone_number,
        hashed_password=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
    )
    db.add(user)
    await flush_or_conflict(db, PHONE_TAKEN)

    await grant_role(db, user.id, ROLE_GUEST)
    await db.refresh(user)

    logger.info("Registered user %s", user.id)
    tokens = create_token_pair(str(user.id))

    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**tokens),
    )


# ---------------------------------------------------------------------------
# POST /login
# ---------------------------------------------------------------------------


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    """Authenticate with phone number and password."""
    result = await db.execute(select(User).where(User.phone_number == body.phone_number))
    user = result.scalar_one_or_none()

    # Same message for unknown phone and wrong password
    if user is None or not verify_password(body.password, user.hashed_password):
        logger.warning("Failed login attempt for %s", body.phone_number)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid phone number or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    tokens = create_token_pair(str(user.id))

    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**tokens),
    )


# ---------------------------------------------------------------------------
# POST /refresh
# ---------------------------------------------------------------------------


@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    """Exchange a valid refresh token for a new token pair."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid refresh token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        user_id = subject_from_token(body.refresh_token, expected_type=REFRESH_TOKEN)
    except JWTError:
        raise credentials_exception from None

    result = await db.execute(select(User.id).where(User.id == user_id))
    if result.first() is None:
        raise credentials_exception

    tokens = create_token_pair(str(user_id))
    return TokenResponse(**tokens)
