"""Testes de leitura: disponibilidade e listagens paginadas."""

from __future__ import annotations

import datetime as dt

import pytest

from app.domain.errors import NotFound, RoleMismatch, ValidationError
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


class TestAvailability:
    @pytest.mark.asyncio
    async def test_booked_slot_disappears(self, harness: BookingHarness) -> None:
        await harness.service.create_booking(create_payload(time="13:00", duration_hours=1))

        view = await harness.service.get_availability(PROVIDER_ID, NEXT_MONDAY)

        assert view.day_of_week == "monday"
        assert "13:00 - 14:00" not in view.labels
        assert view.labels[0] == "09:00 - 10:00"
        assert len(view.labels) == 7
        data = view.to_dict()
        assert data["available"] is True
        assert data["slots"][0] == {"label": "09:00 - 10:00", "start": "09:00", "end": "10:00"}

    @pytest.mark.asyncio
    async def test_cancelled_booking_frees_slot(self, harness: BookingHarness) -> None:
        outcome = await harness.service.create_booking(create_payload(time="13:00"))
        await harness.service.change_booking_status(
            outcome.booking.booking_id, REQUESTER_ID, "cancelled"
        )

        view = await harness.service.get_availability(PROVIDER_ID, NEXT_MONDAY.isoformat())

        assert "13:00 - 14:00" in view.labels

    @pytest.mark.asyncio
    async def test_day_without_windows(self, harness: BookingHarness) -> None:
        sunday = NEXT_MONDAY - dt.timedelta(days=1)

        view = await harness.service.get_availability(PROVIDER_ID, sunday)

        assert view.slots == ()
        assert view.to_dict()["available"] is False

    @pytest.mark.asyncio
    async def test_invalid_inputs(self, harness: BookingHarness) -> None:
        with pytest.raises(ValidationError):
            await harness.service.get_availability(PROVIDER_ID, "09/03/2026")
        with pytest.raises(NotFound):
            await harness.service.get_availability("ghost", NEXT_MONDAY)
        with pytest.raises(RoleMismatch):
            await harness.service.get_availability(REQUESTER_ID, NEXT_MONDAY)


class TestListBookings:
    async def _seed(self, harness: BookingHarness) -> list[str]:
        ids = []
        for time, requester in (
            ("09:00", REQUESTER_ID),
            ("10:00", OTHER_REQUESTER_ID),
            ("11:00", REQUESTER_ID),
        ):
            outcome = await harness.service.create_booking(
                create_payload(time=time, requester_id=requester)
            )
            ids.append(outcome.booking.booking_id)
        await harness.service.change_booking_status(ids[0], PROVIDER_ID, "confirmed")
        return ids

    @pytest.mark.asyncio
    async def test_provider_listing_with_stats(self, harness: BookingHarness) -> None:
        ids = await self._seed(harness)

        page = await harness.service.list_bookings(PROVIDER_ID, "provider")

        assert [b.booking_id for b in page.bookings] == list(reversed(ids))
        assert page.stats == {
            "total": 3,
            "pending": 2,
            "confirmed": 1,
            "rescheduled": 0,
            "completed": 0,
            "cancelled": 0,
        }
        assert page.to_dict()["pagination"] == {"current": 1, "total_pages": 1, "count": 3}

    @pytest.mark.asyncio
    async def test_requester_listing_has_no_stats(self, harness: BookingHarness) -> None:
        await self._seed(harness)

        page = await harness.service.list_bookings(REQUESTER_ID, "requester")

        assert page.count == 2
        assert page.stats is None
        assert "stats" not in page.to_dict()

    @pytest.mark.asyncio
    async def test_status_filter_and_search(self, harness: BookingHarness) -> None:
        ids = await self._seed(harness)

        confirmed = await harness.service.list_bookings(
            PROVIDER_ID, "provider", status="confirmed"
        )
        searched = await harness.service.list_bookings(
            PROVIDER_ID, "provider", search=OTHER_REQUESTER_ID.upper()
        )

        assert [b.booking_id for b in confirmed.bookings] == [ids[0]]
        assert [b.booking_id for b in searched.bookings] == [ids[1]]
        # Estatísticas sempre sobre todas as reservas do provider
        assert searched.stats is not None
        assert searched.stats["total"] == 3

    @pytest.mark.asyncio
    async def test_pagination(self, harness: BookingHarness) -> None:
        ids = await self._seed(harness)

        second = await harness.service.list_bookings(PROVIDER_ID, "provider", page=2, limit=2)
        beyond = await harness.service.list_bookings(PROVIDER_ID, "provider", page=5, limit=2)

        assert [b.booking_id for b in second.bookings] == [ids[0]]
        assert second.total_pages == 2
        assert beyond.bookings == ()

    @pytest.mark.asyncio
    async def test_invalid_listing_arguments(self, harness: BookingHarness) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await harness.service.list_bookings(
                PROVIDER_ID, "admin", status="lost", page=0, limit=500
            )

        assert set(exc_info.value.fields) == {"role", "status", "page", "limit"}

    @pytest.mark.asyncio
    async def test_date_filter_looks_back_from_today(self, harness: BookingHarness) -> None:
        """today/week/month contam para trás a partir de hoje (UTC)."""
        by_offset: dict[int, str] = {}
        for offset in (1, 7, 21):
            outcome = await harness.service.create_booking(
                create_payload(date=TODAY + dt.timedelta(days=offset), time="10:00")
            )
            by_offset[offset] = outcome.booking.booking_id
        harness.today = TODAY + dt.timedelta(days=21)

        async def ids(date_filter: str) -> set[str]:
            page = await harness.service.list_bookings(
                PROVIDER_ID, "provider", date_filter=date_filter
            )
            return {b.booking_id for b in page.bookings}

        assert await ids("today") == {by_offset[21]}
        assert await ids("week") == {by_offset[21]}
        assert await ids("month") == set(by_offset.values())
        assert await ids("all") == set(by_offset.values())

        harness.today = TODAY + dt.timedelta(days=8)
        assert await ids("today") == set()
        assert await ids("week") == {by_offset[1], by_offset[7]}

    @pytest.mark.asyncio
    async def test_unknown_date_filter(self, harness: BookingHarness) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await harness.service.list_bookings(PROVIDER_ID, "provider", date_filter="year")

        assert set(exc_info.value.fields) == {"date_filter"}

    @pytest.mark.asyncio
    async def test_empty_listing(self, harness: BookingHarness) -> None:
        page = await harness.service.list_bookings(PROVIDER_ID, "provider")

        assert page.count == 0
        assert page.total_pages == 0
        assert page.stats is not None
        assert page.stats["total"] == 0
