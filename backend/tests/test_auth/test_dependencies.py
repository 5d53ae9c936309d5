"""Tests for auth dependencies — bearer validation and the auth context."""

import uuid
from datetime import timedelta

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_auth_context
from app.auth.jwt import create_access_token, create_token_pair
from app.models.user import ROLE_ADMIN, ROLE_GUEST, ROLE_HOST, User
from app.services.role_service import grant_role, revoke_role


class TestGetCurrentUser:
    """Test get_current_user via the /users/me endpoint."""

    async def test_missing_token_rejected(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me")
        assert response.status_code in (401, 403)
        assert "error" in response.json()

    async def test_expired_token_rejected(self, client: AsyncClient, guest_user: User):
        token = create_access_token({"sub": str(guest_user.id)}, expires_delta=timedelta(seconds=-1))
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_invalid_token_format(self, client: AsyncClient):
        response = await client.get("/api/v1/users/me", headers={"Authorization": "Bearer not.a.valid.jwt"})
        assert response.status_code == 401
        assert response.json() == {"error": "Could not validate credentials"}

    async def test_refresh_token_type_rejected(self, client: AsyncClient, guest_user: User):
        tokens = create_token_pair(str(guest_user.id))
        headers = {"Authorization": f"Bearer {tokens['refresh_token']}"}
        response = await client.get("/api/v1/users/me", headers=headers)
        assert response.status_code == 401

    async def test_nonexistent_user_id_rejected(self, client: AsyncClient):
        token = create_access_token({"sub": str(uuid.uuid4())})
        response = await client.get("/api/v1/users/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401


class TestGetAuthContext:
    """The context carries only the roles that are currently active."""

    async def test_roles_reflect_active_rows(self, db_session: AsyncSession, guest_user: User):
        await grant_role(db_session, guest_user.id, ROLE_HOST)
        ctx = await get_auth_context(user=guest_user, db=db_session)
        assert ctx.subject_id == guest_user.id
        assert ctx.roles == frozenset({ROLE_GUEST, ROLE_HOST})
        assert ctx.is_admin is False

    async def test_revoked_role_not_included(self, db_session: AsyncSession, admin_user: User):
        ctx = await get_auth_context(user=admin_user, db=db_session)
        assert ctx.is_admin is True

        await revoke_role(db_session, admin_user.id, ROLE_ADMIN)
        ctx = await get_auth_context(user=admin_user, db=db_session)
        assert ctx.is_admin is False
        assert ctx.has_role(ROLE_GUEST)
