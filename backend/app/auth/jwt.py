"""JWT token creation and verification for access and refresh tokens."""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from app.config import settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def _encode(data: dict, token_type: str, lifetime: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + lifetime, "iat": now, "type": token_type})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a short-lived access token.

    Args:
        data: Payload data. Must include ``sub`` (user UUID as string).
        expires_delta: Custom expiration duration. Defaults to
            ``settings.jwt_access_token_expire_minutes`` minutes.
    """
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    return _encode(data, ACCESS_TOKEN, lifetime)


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a long-lived refresh token (``settings.jwt_refresh_token_expire_days`` by default)."""
    lifetime = expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    return _encode(data, REFRESH_TOKEN, lifetime)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Raises:
        jose.JWTError: If the token is invalid, expired, or malformed.
    """
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])


def subject_from_token(token: str, expected_type: str = ACCESS_TOKEN) -> uuid.UUID:
    """Return the user UUID carried by ``token``.

    Raises:
        jose.JWTError: If the token does not verify, has the wrong ``type``
            claim, or its ``sub`` is not a UUID.
    """
    payload = decode_token(token)
    if payload.get("type") != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    sub = payload.get("sub")
    if sub is None:
        raise JWTError("Token has no subject")
    try:
        return uuid.UUID(sub)
    except ValueError:
        raise JWTError("Token subject is not a user id") from None


def create_token_pair(user_id: str) -> dict[str, str]:
    """Create both access and refresh tokens for a user.

    Returns:
        Dictionary with ``access_token``, ``refresh_token``, and ``token_type``.
    """
    payload = {"sub": user_id}
    return {
        "access_token": create_access_token(payload),
        "refresh_token": create_refresh_token(payload),
        "token_type": "bearer",
    }
