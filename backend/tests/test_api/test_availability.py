"""Tests for the availability calendar and override management."""

import uuid

from httpx import AsyncClient


def _calendar_url(property_id: str) -> str:
    return f"/api/v1/properties/{property_id}/availability"


async def _calendar(client: AsyncClient, property_id: str, start: str, end: str) -> dict:
    response = await client.get(_calendar_url(property_id), params={"from": start, "to": end})
    assert response.status_code == 200, response.text
    return response.json()


def _by_date(calendar: dict) -> dict[str, dict]:
    return {day["date"]: day for day in calendar["days"]}


class TestCalendar:
    async def test_empty_calendar(self, client: AsyncClient, short_term_property: dict):
        data = await _calendar(client, short_term_property["id"], "2030-06-01", "2030-06-08")
        assert data["property_id"] == short_term_property["id"]
        assert data["from"] == "2030-06-01"
        assert data["to"] == "2030-06-08"
        assert len(data["days"]) == 7
        assert all(day["available"] for day in data["days"])
        assert all(day["reason"] is None for day in data["days"])

    async def test_default_window(self, client: AsyncClient, short_term_property: dict):
        response = await client.get(_calendar_url(short_term_property["id"]))
        assert response.status_code == 200
        assert len(response.json()["days"]) == 60

    async def test_bookings_mark_days_booked(
        self, client: AsyncClient, guest_headers: dict, short_term_property: dict
    ):
        await client.post(
            "/api/v1/bookings",
            json={
                "property_id": short_term_property["id"],
                "check_in": "2030-06-02T14:00:00",
                "check_out": "2030-06-04T10:00:00",
                "guests_count": 1,
            },
            headers=guest_headers,
        )
        days = _by_date(await _calendar(client, short_term_property["id"], "2030-06-01", "2030-06-06"))
        assert days["2030-06-01"]["available"] is True
        assert days["2030-06-02"]["reason"] == "booked"
        assert days["2030-06-03"]["reason"] == "booked"
        # Check-out day is free again
        assert days["2030-06-04"]["available"] is True

    async def test_cancelled_bookings_ignored(
        self, client: AsyncClient, guest_headers: dict, host_headers: dict, short_term_property: dict
    ):
        booking = (
            await client.post(
                "/api/v1/bookings",
                json={
                    "property_id": short_term_property["id"],
                    "check_in": "2030-06-02T00:00:00",
                    "check_out": "2030-06-03T00:00:00",
                    "guests_count": 1,
                },
                headers=guest_headers,
            )
        ).json()
        await client.patch(f"/api/v1/bookings/{booking['id']}/status", json={"status": "cancelled"}, headers=host_headers)

        days = _by_date(await _calendar(client, short_term_property["id"], "2030-06-01", "2030-06-04"))
        assert days["2030-06-02"]["available"] is True

    async def test_to_must_follow_from(self, client: AsyncClient, short_term_property: dict):
        response = await client.get(
            _calendar_url(short_term_property["id"]), params={"from": "2030-06-05", "to": "2030-06-05"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "'to' must be after 'from'"}

    async def test_window_too_long(self, client: AsyncClient, short_term_property: dict):
        response = await client.get(
            _calendar_url(short_term_property["id"]), params={"from": "2030-01-01", "to": "2032-01-01"}
        )
        assert response.status_code == 400

    async def test_unknown_property(self, client: AsyncClient):
        response = await client.get(_calendar_url(str(uuid.uuid4())))
        assert response.status_code == 404


class TestBulkOverrides:
    async def test_block_days(self, client: AsyncClient, host_headers: dict, short_term_property: dict):
        response = await client.post(
            f"{_calendar_url(short_term_property['id'])}/bulk",
            json={"from": "2030-06-03", "to": "2030-06-05", "available": False},
            headers=host_headers,
        )
        assert response.status_code == 200
        assert response.json() == {
            "property_id": short_term_property["id"],
            "from": "2030-06-03",
            "to": "2030-06-05",
            "written": 2,
            "cleared": 0,
        }

        days = _by_date(await _calendar(client, short_term_property["id"], "2030-06-01", "2030-06-06"))
        assert days["2030-06-02"]["available"] is True
        assert days["2030-06-03"]["reason"] == "blocked"
        assert days["2030-06-04"]["reason"] == "blocked"
        assert days["2030-06-05"]["available"] is True

    async def test_price_override_shown(self, client: AsyncClient, host_headers: dict, short_term_property: dict):
        await client.post(
            f"{_calendar_url(short_term_property['id'])}/bulk",
            json={"from": "2030-12-24", "to": "2030-12-26", "available": True, "price_override": 90},
            headers=host_headers,
        )
        days = _by_date(await _calendar(client, short_term_property["id"], "2030-12-24", "2030-12-27"))
        assert days["2030-12-24"]["available"] is True
        assert float(days["2030-12-24"]["price_override"]) == 90.00
        assert days["2030-12-26"]["price_override"] is None

    async def test_booked_wins_over_blocked(
        self, client: AsyncClient, host_headers: dict, guest_headers: dict, short_term_property: dict
    ):
        await client.post(
            "/api/v1/bookings",
            json={
                "property_id": short_term_property["id"],
                "check_in": "2030-06-01T00:00:00",
                "check_out": "2030-06-03T00:00:00",
                "guests_count": 1,
            },
            headers=guest_headers,
        )
        await client.post(
            f"{_calendar_url(short_term_property['id'])}/bulk",
            json={"from": "2030-06-02", "to": "2030-06-04", "available": False},
            headers=host_headers,
        )
        days = _by_date(await _calendar(client, short_term_property["id"], "2030-06-01", "2030-06-05"))
        assert days["2030-06-02"]["reason"] == "booked"
        assert days["2030-06-03"]["reason"] == "blocked"

    async def test_available_without_price_clears(
        self, client: AsyncClient, host_headers: dict, short_term_property: dict
    ):
        url = f"{_calendar_url(short_term_property['id'])}/bulk"
        await client.post(url, json={"from": "2030-06-01", "to": "2030-06-04", "available": False}, headers=host_headers)

        response = await client.post(
            url, json={"from": "2030-06-02", "to": "2030-06-06", "available": True}, headers=host_headers
        )
        assert response.json()["cleared"] == 2
        assert response.json()["written"] == 0

        response = await client.get(f"{_calendar_url(short_term_property['id'])}/overrides", headers=host_headers)
        assert [o["day"] for o in response.json()] == ["2030-06-01"]

    async def test_upsert_replaces_existing_day(
        self, client: AsyncClient, host_headers: dict, short_term_property: dict
    ):
        url = f"{_calendar_url(short_term_property['id'])}/bulk"
        await client.post(url, json={"from": "2030-06-01", "to": "2030-06-02", "available": False}, headers=host_headers)
        await client.post(
            url,
            json={"from": "2030-06-01", "to": "2030-06-02", "available": True, "price_override": 40},
            headers=host_headers,
        )
        response = await client.get(f"{_calendar_url(short_term_property['id'])}/overrides", headers=host_headers)
        overrides = response.json()
        assert len(overrides) == 1
        assert overrides[0]["available"] is True
        assert float(overrides[0]["price_override"]) == 40.00

    async def test_delete_range(self, client: AsyncClient, host_headers: dict, short_term_property: dict):
        url = f"{_calendar_url(short_term_property['id'])}/bulk"
        await client.post(url, json={"from": "2030-06-01", "to": "2030-06-05", "available": False}, headers=host_headers)

        response = await client.delete(url, params={"from": "2030-06-01", "to": "2030-06-03"}, headers=host_headers)
        assert response.status_code == 200
        assert response.json()["cleared"] == 2

        days = _by_date(await _calendar(client, short_term_property["id"], "2030-06-01", "2030-06-05"))
        assert days["2030-06-02"]["available"] is True
        assert days["2030-06-03"]["reason"] == "blocked"

    async def test_stranger_forbidden(self, client: AsyncClient, guest_headers: dict, short_term_property: dict):
        url = f"{_calendar_url(short_term_property['id'])}/bulk"
        response = await client.post(
            url, json={"from": "2030-06-01", "to": "2030-06-02", "available": False}, headers=guest_headers
        )
        assert response.status_code == 403

        response = await client.get(f"{_calendar_url(short_term_property['id'])}/overrides", headers=guest_headers)
        assert response.status_code == 403

    async def test_invalid_range(self, client: AsyncClient, host_headers: dict, short_term_property: dict):
        response = await client.post(
            f"{_calendar_url(short_term_property['id'])}/bulk",
            json={"from": "2030-06-05", "to": "2030-06-01", "available": False},
            headers=host_headers,
        )
        assert response.status_code == 400

    async def test_price_override_beyond_money_column(
        self, client: AsyncClient, host_headers: dict, short_term_property: dict
    ):
        response = await client.post(
            f"{_calendar_url(short_term_property['id'])}/bulk",
            json={"from": "2030-06-01", "to": "2030-06-03", "available": True, "price_override": "1000000000"},
            headers=host_headers,
        )
        assert response.status_code == 400
        assert "price_override" in response.json()["error"]
