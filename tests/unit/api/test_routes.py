"""Tests for the HTTP boundary, driven in-process through httpx's ASGI transport."""

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from agenda.api.app import create_app
from agenda.appointments.adapters.fake import FakeAppointmentStore
from agenda.appointments.service import AppointmentService
from agenda.config import ApiConfig, AppConfig

# Fixtures (fake_store, service) provided by tests/conftest.py

TOKEN = "staff-session-token"
BASE = "/api/agenda/appointments"
MISSING_ID = "0" * 32


@pytest.fixture
def app(service: AppointmentService) -> FastAPI:
    config = AppConfig(api=ApiConfig(session_tokens=[TOKEN]))
    return create_app(config, service=service)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient]:
    """An authenticated client with the app's lifespan running."""
    async with app.router.lifespan_context(app):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://agenda.test",
            headers={"Cookie": f"token={TOKEN}"},
        ) as c:
            yield c


def _body(**overrides: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "date": "2024-01-10",
        "time": "10:00",
        "duration": 60,
        "title": "Consultation",
        "clientId": "c1",
        "clientName": "Ana Souza",
        "value": 120,
    }
    body.update(overrides)
    return body


async def _create(client: httpx.AsyncClient, **overrides: Any) -> dict[str, Any]:
    response = await client.post(BASE, json=_body(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestAuthentication:
    @pytest.mark.asyncio
    async def test_missing_token_is_rejected(self, app: FastAPI) -> None:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://agenda.test"
        ) as anonymous:
            response = await anonymous.get(BASE, params={"date": "2024-01-10"})

        assert response.status_code == 401
        assert response.json() == {"error": "Session token not provided"}

    @pytest.mark.asyncio
    async def test_invalid_token_is_rejected(self, app: FastAPI) -> None:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://agenda.test",
            headers={"Cookie": "token=forged"},
        ) as forged:
            response = await forged.get(BASE)

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_bearer_header_is_accepted(self, app: FastAPI) -> None:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://agenda.test",
            headers={"Authorization": f"Bearer {TOKEN}"},
        ) as bearer:
            response = await bearer.get(BASE)

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_needs_no_token(self, app: FastAPI) -> None:
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://agenda.test"
        ) as anonymous:
            response = await anonymous.get("/api/agenda/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCreateEndpoint:
    @pytest.mark.asyncio
    async def test_returns_201_with_camel_case_record(self, client: httpx.AsyncClient) -> None:
        created = await _create(client, note="first visit", _id="ignored")

        assert created["id"]
        assert created["date"] == "2024-01-10"
        assert created["time"] == "10:00"
        assert created["durationMinutes"] == 60
        assert created["clientId"] == "c1"
        assert created["clientName"] == "Ana Souza"
        assert created["note"] == "first visit"
        assert created["completed"] is False

    @pytest.mark.asyncio
    async def test_duration_defaults_when_omitted(self, client: httpx.AsyncClient) -> None:
        body = _body()
        del body["duration"]

        response = await client.post(BASE, json=body)

        assert response.json()["durationMinutes"] == 60

    @pytest.mark.asyncio
    async def test_conflict_is_400_with_conflicting_ids(self, client: httpx.AsyncClient) -> None:
        first = await _create(client)

        response = await client.post(BASE, json=_body(time="10:30", duration=30))

        assert response.status_code == 400
        assert response.json()["conflicts"] == [first["id"]]

    @pytest.mark.asyncio
    async def test_back_to_back_is_201(self, client: httpx.AsyncClient) -> None:
        await _create(client)

        response = await client.post(BASE, json=_body(time="11:00"))

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_missing_field_is_400(self, client: httpx.AsyncClient) -> None:
        body = _body()
        del body["clientName"]

        response = await client.post(BASE, json=body)

        assert response.status_code == 400
        assert "client_name" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_null_value_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post(BASE, json=_body(value=None))

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_out_of_hours_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post(BASE, json=_body(time="06:59"))

        assert response.status_code == 400
        assert "Invalid time" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_time_with_utc_offset_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post(BASE, json=_body(time="10:00Z"))

        assert response.status_code == 400
        assert "UTC offset" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post(BASE, json=_body(date="next tuesday"))

        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request")


class TestListEndpoint:
    @pytest.mark.asyncio
    async def test_range_query(self, client: httpx.AsyncClient) -> None:
        for day in ("2024-01-05", "2024-01-10", "2024-01-15"):
            await _create(client, date=day)

        response = await client.get(
            BASE, params={"startDate": "2024-01-06", "endDate": "2024-01-12"}
        )

        assert response.status_code == 200
        assert [a["date"] for a in response.json()] == ["2024-01-10"]

    @pytest.mark.asyncio
    async def test_date_query_sorted_by_time(self, client: httpx.AsyncClient) -> None:
        await _create(client, time="15:00")
        await _create(client, time="08:00")

        response = await client.get(BASE, params={"date": "2024-01-10"})

        assert [a["time"] for a in response.json()] == ["08:00", "15:00"]

    @pytest.mark.asyncio
    async def test_malformed_date_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.get(BASE, params={"date": "10/01/2024"})

        assert response.status_code == 400


class TestUpdateEndpoint:
    @pytest.mark.asyncio
    async def test_updating_note_keeps_slot(self, client: httpx.AsyncClient) -> None:
        created = await _create(client)

        response = await client.put(f"{BASE}/{created['id']}", json=_body(note="bring x-rays"))

        assert response.status_code == 200
        assert response.json()["note"] == "bring x-rays"
        assert response.json()["time"] == "10:00"

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client: httpx.AsyncClient) -> None:
        response = await client.put(f"{BASE}/{MISSING_ID}", json=_body())

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.put(f"{BASE}/not-an-id", json=_body())

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_conflict_is_400(self, client: httpx.AsyncClient) -> None:
        await _create(client, time="10:00")
        other = await _create(client, time="14:00")

        response = await client.put(f"{BASE}/{other['id']}", json=_body(time="10:15"))

        assert response.status_code == 400


class TestCompleteEndpoint:
    @pytest.mark.asyncio
    async def test_is_idempotent(self, client: httpx.AsyncClient) -> None:
        created = await _create(client)

        first = await client.patch(f"{BASE}/{created['id']}/complete")
        second = await client.patch(f"{BASE}/{created['id']}/complete")

        assert first.status_code == second.status_code == 200
        assert second.json()["completed"] is True

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client: httpx.AsyncClient) -> None:
        response = await client.patch(f"{BASE}/{MISSING_ID}/complete")

        assert response.status_code == 404


class TestDeleteEndpoint:
    @pytest.mark.asyncio
    async def test_returns_deleted_record_and_frees_slot(self, client: httpx.AsyncClient) -> None:
        created = await _create(client)

        response = await client.delete(f"{BASE}/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created
        assert (await client.get(f"{BASE}/{created['id']}")).status_code == 404
        assert (await client.post(BASE, json=_body(time="10:30"))).status_code == 201

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self, client: httpx.AsyncClient) -> None:
        response = await client.delete(f"{BASE}/{MISSING_ID}")

        assert response.status_code == 404


class TestSlotsEndpoint:
    @pytest.mark.asyncio
    async def test_reflects_bookings_for_requested_duration(
        self, client: httpx.AsyncClient
    ) -> None:
        await _create(client, time="09:00")

        response = await client.get(f"{BASE}/slots", params={"date": "2024-01-10", "duration": 15})

        slots = {s["time"]: s["available"] for s in response.json()}
        assert response.status_code == 200
        assert len(slots) == 61
        assert slots["08:45"] is True
        assert slots["09:00"] is False
        assert slots["10:00"] is True

    @pytest.mark.asyncio
    async def test_exclude_id_frees_edited_appointment(self, client: httpx.AsyncClient) -> None:
        created = await _create(client, time="09:00")

        response = await client.get(
            f"{BASE}/slots", params={"date": "2024-01-10", "excludeId": created["id"]}
        )

        slots = {s["time"]: s["available"] for s in response.json()}
        assert slots["09:00"] is True

    @pytest.mark.asyncio
    async def test_date_is_required(self, client: httpx.AsyncClient) -> None:
        response = await client.get(f"{BASE}/slots")

        assert response.status_code == 400


class TestStoreFailures:
    @pytest.mark.asyncio
    async def test_store_error_is_503(
        self, client: httpx.AsyncClient, fake_store: FakeAppointmentStore
    ) -> None:
        fake_store.find_error = ConnectionError("connection reset")

        response = await client.get(BASE, params={"date": "2024-01-10"})

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_unhealthy_store_fails_health_check(
        self, client: httpx.AsyncClient, fake_store: FakeAppointmentStore
    ) -> None:
        fake_store.healthy = False

        response = await client.get("/api/agenda/health")

        assert response.status_code == 503
