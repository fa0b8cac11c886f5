"""Testes HTTP das rotas de reservas (TestClient + overrides de dependência)."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.routes.bookings.dependencies import booking_service, side_effect_dispatcher
from app.app import create_app
from tests.fakes.booking_builders import (
    OTHER_REQUESTER_ID,
    PROVIDER_ID,
    REQUESTER_ID,
    TODAY,
    BookingHarness,
    create_payload,
)

NEXT_MONDAY = TODAY + dt.timedelta(days=7)


@pytest.fixture
def harness() -> BookingHarness:
    return BookingHarness()


@pytest.fixture
def api_app(harness: BookingHarness) -> FastAPI:
    fastapi_app = create_app()
    service = harness.service
    dispatcher = harness.dispatcher()
    fastapi_app.dependency_overrides[booking_service] = lambda: service
    fastapi_app.dependency_overrides[side_effect_dispatcher] = lambda: dispatcher
    return fastapi_app


@pytest.fixture
def client(api_app: FastAPI) -> Iterator[TestClient]:
    with TestClient(api_app) as test_client:
        yield test_client


def _as(actor_id: str) -> dict[str, str]:
    return {"X-Actor-Id": actor_id}


def _create(client: TestClient, **kwargs: object) -> dict:
    payload = create_payload(**kwargs)
    response = client.post(
        "/bookings", json=payload, headers=_as(str(payload["requester_id"]))
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateBookingRoute:
    def test_create_returns_booking_and_intents(self, client: TestClient) -> None:
        body = _create(client, time="13:00", duration_hours=2)

        booking = body["booking"]
        assert booking["status"] == "pending"
        assert booking["amount"] == 1600.0
        assert booking["end_time"] == "15:00"
        assert booking["display_code"].startswith("BK")
        (intent,) = body["side_effects"]
        assert intent["kind"] == "notice"
        assert intent["intent_id"].endswith(f":booking_pending:{PROVIDER_ID}")

    def test_requester_defaults_to_actor(self, client: TestClient) -> None:
        payload = create_payload()
        payload.pop("requester_id")

        response = client.post("/bookings", json=payload, headers=_as(REQUESTER_ID))

        assert response.status_code == 201
        assert response.json()["booking"]["requester"]["user_id"] == REQUESTER_ID

    def test_requester_must_be_actor(self, client: TestClient) -> None:
        response = client.post(
            "/bookings", json=create_payload(), headers=_as(OTHER_REQUESTER_ID)
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"]["fields"] == {
            "requester_id": "deve ser o ator autenticado"
        }

    def test_missing_actor_header(self, client: TestClient) -> None:
        response = client.post("/bookings", json=create_payload())

        assert response.status_code == 422
        assert "X-Actor-Id" in response.json()["error"]["details"]["fields"]

    def test_missing_fields(self, client: TestClient) -> None:
        response = client.post(
            "/bookings", json={"provider_id": PROVIDER_ID}, headers=_as(REQUESTER_ID)
        )

        error = response.json()["error"]
        assert response.status_code == 422
        assert error["kind"] == "validation"
        assert {"subject", "date", "time", "duration_hours"} <= set(error["details"]["fields"])

    def test_non_object_body(self, client: TestClient) -> None:
        response = client.post("/bookings", json=[1, 2], headers=_as(REQUESTER_ID))

        assert response.status_code == 422
        assert response.json()["error"]["kind"] == "validation"

    def test_conflict_is_409(self, client: TestClient) -> None:
        _create(client, time="13:00", duration_hours=2)

        response = client.post(
            "/bookings",
            json=create_payload(time="14:00", requester_id=OTHER_REQUESTER_ID),
            headers=_as(OTHER_REQUESTER_ID),
        )

        assert response.status_code == 409
        assert response.json()["error"]["kind"] == "slot_conflict"

    def test_horizon_violation_is_422(self, client: TestClient) -> None:
        response = client.post(
            "/bookings", json=create_payload(date=TODAY), headers=_as(REQUESTER_ID)
        )

        assert response.status_code == 422
        assert response.json()["error"]["kind"] == "horizon_violation"

    def test_correlation_id_is_echoed(self, client: TestClient) -> None:
        response = client.get(
            "/bookings", headers={**_as(REQUESTER_ID), "X-Correlation-Id": "corr-abc"}
        )

        assert response.headers["X-Correlation-Id"] == "corr-abc"


class TestStatusRoutes:
    def test_provider_confirms(self, client: TestClient) -> None:
        booking_id = _create(client)["booking"]["booking_id"]

        response = client.patch(
            f"/bookings/{booking_id}/status",
            json={"status": "confirmed", "meeting_link": "https://meet.example.com/x"},
            headers=_as(PROVIDER_ID),
        )

        body = response.json()
        assert response.status_code == 200
        assert body["booking"]["status"] == "confirmed"
        assert body["booking"]["meeting_link"] == "https://meet.example.com/x"
        assert body["side_effects"][0]["intent_id"].endswith(f":booking_approved:{REQUESTER_ID}")

    def test_status_required(self, client: TestClient) -> None:
        booking_id = _create(client)["booking"]["booking_id"]

        response = client.patch(
            f"/bookings/{booking_id}/status", json={}, headers=_as(PROVIDER_ID)
        )

        assert response.status_code == 422
        assert response.json()["error"]["details"]["fields"] == {"status": "obrigatório"}

    def test_invalid_transition_is_409(self, client: TestClient) -> None:
        booking_id = _create(client)["booking"]["booking_id"]

        response = client.patch(
            f"/bookings/{booking_id}/status",
            json={"status": "completed"},
            headers=_as(PROVIDER_ID),
        )

        assert response.status_code == 409
        assert response.json()["error"]["details"] == {
            "source": "pending",
            "target": "completed",
        }

    def test_stranger_is_403(self, client: TestClient) -> None:
        booking_id = _create(client)["booking"]["booking_id"]

        response = client.patch(
            f"/bookings/{booking_id}/status",
            json={"status": "cancelled"},
            headers=_as(OTHER_REQUESTER_ID),
        )

        assert response.status_code == 403
        assert response.json()["error"]["kind"] == "forbidden"

    def test_unknown_booking_is_404(self, client: TestClient) -> None:
        response = client.get("/bookings/missing", headers=_as(PROVIDER_ID))

        assert response.status_code == 404
        assert response.json()["error"]["details"] == {"entity": "booking", "id": "missing"}

    def test_reschedule(self, client: TestClient) -> None:
        booking_id = _create(client, time="10:00")["booking"]["booking_id"]

        response = client.post(
            f"/bookings/{booking_id}/reschedule",
            json={"new_date": NEXT_MONDAY.isoformat(), "new_time": "15:00"},
            headers=_as(REQUESTER_ID),
        )

        body = response.json()
        assert response.status_code == 200
        assert body["booking"]["status"] == "rescheduled"
        assert body["booking"]["rescheduled_from"] == {
            "date": NEXT_MONDAY.isoformat(),
            "time": "10:00",
        }
        assert body["side_effects"] == []

    def test_reschedule_requires_fields(self, client: TestClient) -> None:
        booking_id = _create(client)["booking"]["booking_id"]

        response = client.post(
            f"/bookings/{booking_id}/reschedule", json={}, headers=_as(REQUESTER_ID)
        )

        assert response.status_code == 422
        assert set(response.json()["error"]["details"]["fields"]) == {"new_date", "new_time"}


class TestReadRoutes:
    def test_details_for_party(self, client: TestClient) -> None:
        booking_id = _create(client)["booking"]["booking_id"]

        response = client.get(f"/bookings/{booking_id}", headers=_as(PROVIDER_ID))

        assert response.status_code == 200
        assert response.json()["booking"]["booking_id"] == booking_id

    def test_provider_listing(self, client: TestClient) -> None:
        _create(client, time="09:00")
        _create(client, time="10:00", requester_id=OTHER_REQUESTER_ID)

        response = client.get(
            "/bookings", params={"role": "provider", "limit": 1}, headers=_as(PROVIDER_ID)
        )

        body = response.json()
        assert response.status_code == 200
        assert len(body["bookings"]) == 1
        assert body["pagination"] == {"current": 1, "total_pages": 2, "count": 2}
        assert body["stats"]["pending"] == 2

    def test_listing_validation(self, client: TestClient) -> None:
        response = client.get(
            "/bookings", params={"role": "admin"}, headers=_as(PROVIDER_ID)
        )

        assert response.status_code == 422
        assert "role" in response.json()["error"]["details"]["fields"]

    def test_listing_date_filter(self, client: TestClient, harness: BookingHarness) -> None:
        _create(client, time="09:00")
        params = {"role": "provider", "date_filter": "today"}

        before = client.get("/bookings", params=params, headers=_as(PROVIDER_ID))
        harness.today = NEXT_MONDAY
        on_the_day = client.get("/bookings", params=params, headers=_as(PROVIDER_ID))
        invalid = client.get(
            "/bookings", params={"date_filter": "decade"}, headers=_as(PROVIDER_ID)
        )

        assert before.json()["pagination"]["count"] == 0
        assert on_the_day.json()["pagination"]["count"] == 1
        assert invalid.status_code == 422
        assert "date_filter" in invalid.json()["error"]["details"]["fields"]

    def test_non_integer_page(self, client: TestClient) -> None:
        response = client.get("/bookings", params={"page": "x"}, headers=_as(PROVIDER_ID))

        assert response.status_code == 422
        assert "page" in response.json()["error"]["details"]["fields"]

    def test_availability(self, client: TestClient) -> None:
        _create(client, time="13:00")

        response = client.get(
            f"/providers/{PROVIDER_ID}/availability", params={"date": NEXT_MONDAY.isoformat()}
        )

        body = response.json()
        assert response.status_code == 200
        assert body["available"] is True
        assert "13:00 - 14:00" not in [slot["label"] for slot in body["slots"]]

    def test_availability_requires_date(self, client: TestClient) -> None:
        response = client.get(f"/providers/{PROVIDER_ID}/availability")

        assert response.status_code == 422
        assert response.json()["error"]["details"]["fields"] == {"date": "obrigatório"}


class TestSideEffectDelivery:
    def test_cancellation_effects_are_delivered_in_background(
        self, api_app: FastAPI, harness: BookingHarness
    ) -> None:
        """Estorno e avisos são entregues após a resposta (drenados no shutdown)."""
        with TestClient(api_app) as client:
            booking_id = _create(client, duration_hours=2)["booking"]["booking_id"]
            harness.payments.record_payment(booking_id, 1600.0)

            response = client.patch(
                f"/bookings/{booking_id}/status",
                json={"status": "cancelled", "cancel_reason": "imprevisto"},
                headers=_as(PROVIDER_ID),
            )

        assert response.status_code == 200
        assert [e["kind"] for e in response.json()["side_effects"]] == [
            "refund_requested",
            "notice",
            "notice",
        ]
        assert harness.payments.refunds == [(f"pay-{booking_id[:8]}", 1600.0, "imprevisto")]
        # Tasks de requisições diferentes podem se intercalar
        assert sorted(harness.notifications.notice_types) == [
            "booking_pending",
            "booking_rejected",
            "refund_processed",
        ]
