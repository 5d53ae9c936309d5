"""Pydantic v2 request/response schemas for authentication endpoints."""

from pydantic import BaseModel, Field

from app.schemas.user import UserResponse

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------

PHONE_PATTERN = r"^\+?[0-9 ]{6,20}$"


class RegisterRequest(BaseModel):
    """Schema for user registration."""

    phone_number: str = Field(..., pattern=PHONE_PATTERN)
    password: str = Field(..., min_length=8, max_length=128)
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)


class LoginRequest(BaseModel):
    """Schema for phone/password login."""

    phone_number: str
    password: str


class RefreshRequest(BaseModel):
    """Schema for token refresh."""

    refresh_token: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    """JWT token pair returned on successful authentication."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class AuthResponse(BaseModel):
    """Combined user + tokens returned on register/login."""

    user: UserResponse
    tokens: TokenResponse


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
