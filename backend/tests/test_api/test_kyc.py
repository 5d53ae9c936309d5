"""Tests for the identity verification workflow."""

import uuid

import pytest_asyncio
from httpx import AsyncClient

from app.models.user import User

DOCUMENTS = ["https://files.example.com/id-front.jpg", "https://files.example.com/id-back.jpg"]


@pytest_asyncio.fixture
async def pending_request(client: AsyncClient, guest_headers: dict) -> dict:
    response = await client.post(
        "/api/v1/kyc/submit",
        json={"document_urls": DOCUMENTS, "note": "National ID"},
        headers=guest_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _is_verified(client: AsyncClient, headers: dict) -> bool:
    response = await client.get("/api/v1/users/me", headers=headers)
    return response.json()["verified"]


class TestSubmit:
    async def test_submit(self, client: AsyncClient, guest_user: User, pending_request: dict):
        assert pending_request["user_id"] == str(guest_user.id)
        assert pending_request["status"] == "pending"
        assert pending_request["document_urls"] == DOCUMENTS
        assert pending_request["reviewed_by_id"] is None

    async def test_second_pending_conflicts(self, client: AsyncClient, guest_headers: dict, pending_request: dict):
        response = await client.post("/api/v1/kyc/submit", json={"document_urls": DOCUMENTS}, headers=guest_headers)
        assert response.status_code == 409

    async def test_documents_required(self, client: AsyncClient, guest_headers: dict):
        response = await client.post("/api/v1/kyc/submit", json={"document_urls": []}, headers=guest_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "At least one document is required"}

    async def test_resubmit_after_rejection(
        self, client: AsyncClient, guest_headers: dict, admin_headers: dict, pending_request: dict
    ):
        await client.patch(f"/api/v1/kyc/{pending_request['id']}/reject", headers=admin_headers)
        response = await client.post("/api/v1/kyc/submit", json={"document_urls": DOCUMENTS}, headers=guest_headers)
        assert response.status_code == 201

    async def test_mine(self, client: AsyncClient, guest_headers: dict, other_headers: dict, pending_request: dict):
        response = await client.get("/api/v1/kyc/mine", headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["id"] == pending_request["id"]

        response = await client.get("/api/v1/kyc/mine", headers=other_headers)
        assert response.status_code == 200
        assert response.json() is None


class TestReview:
    async def test_pending_queue_admin_only(
        self, client: AsyncClient, guest_headers: dict, admin_headers: dict, pending_request: dict
    ):
        response = await client.get("/api/v1/kyc/pending", headers=admin_headers)
        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [pending_request["id"]]

        response = await client.get("/api/v1/kyc/pending", headers=guest_headers)
        assert response.status_code == 403

    async def test_get_request(self, client: AsyncClient, admin_headers: dict, pending_request: dict):
        response = await client.get(f"/api/v1/kyc/{pending_request['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["note"] == "National ID"

        response = await client.get(f"/api/v1/kyc/{uuid.uuid4()}", headers=admin_headers)
        assert response.status_code == 404

    async def test_approve_verifies_user(
        self,
        client: AsyncClient,
        admin_user: User,
        admin_headers: dict,
        guest_headers: dict,
        pending_request: dict,
    ):
        response = await client.patch(
            f"/api/v1/kyc/{pending_request['id']}/approve", json={"note": "Looks good"}, headers=admin_headers
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["reviewed_by_id"] == str(admin_user.id)
        assert data["reviewed_at"] is not None
        assert data["note"] == "Looks good"

        assert await _is_verified(client, guest_headers) is True

    async def test_decision_is_final(
        self, client: AsyncClient, admin_headers: dict, pending_request: dict
    ):
        await client.patch(f"/api/v1/kyc/{pending_request['id']}/approve", headers=admin_headers)

        response = await client.patch(f"/api/v1/kyc/{pending_request['id']}/approve", headers=admin_headers)
        assert response.status_code == 400
        assert response.json() == {"error": "Verification request is not pending"}

        response = await client.patch(f"/api/v1/kyc/{pending_request['id']}/reject", headers=admin_headers)
        assert response.status_code == 400

    async def test_reject_leaves_user_unverified(
        self, client: AsyncClient, admin_headers: dict, guest_headers: dict, pending_request: dict
    ):
        response = await client.patch(f"/api/v1/kyc/{pending_request['id']}/reject", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert await _is_verified(client, guest_headers) is False

    async def test_non_admin_cannot_approve(self, client: AsyncClient, guest_headers: dict, pending_request: dict):
        response = await client.patch(f"/api/v1/kyc/{pending_request['id']}/approve", headers=guest_headers)
        assert response.status_code == 403


class TestWithdraw:
    async def test_withdraw_approved_reverts_verification(
        self, client: AsyncClient, admin_headers: dict, guest_headers: dict, pending_request: dict
    ):
        await client.patch(f"/api/v1/kyc/{pending_request['id']}/approve", headers=admin_headers)
        assert await _is_verified(client, guest_headers) is True

        response = await client.delete(f"/api/v1/kyc/{pending_request['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert await _is_verified(client, guest_headers) is False

        response = await client.get(f"/api/v1/kyc/{pending_request['id']}", headers=admin_headers)
        assert response.status_code == 404

    async def test_withdraw_pending(self, client: AsyncClient, admin_headers: dict, pending_request: dict):
        response = await client.delete(f"/api/v1/kyc/{pending_request['id']}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"message": "Verification request deleted"}

    async def test_non_admin_cannot_withdraw(self, client: AsyncClient, guest_headers: dict, pending_request: dict):
        response = await client.delete(f"/api/v1/kyc/{pending_request['id']}", headers=guest_headers)
        assert response.status_code == 403
