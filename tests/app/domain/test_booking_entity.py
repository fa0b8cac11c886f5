"""Testes da entidade Booking, snapshots e intenções de side effect."""

from __future__ import annotations

from app.domain.booking import UNKNOWN_PHONE, PartySnapshot
from app.domain.errors import DependencyFailure, SlotConflict, ValidationError
from app.domain.parties import PartyRole
from app.domain.side_effects import (
    NoticeType,
    booking_pending_notice,
    refund_processed_notice,
    refund_requested,
)
from fsm import BookingStatus
from tests.fakes.booking_builders import PROVIDER_ID, REQUESTER_ID, make_booking, make_requester


class TestBooking:
    def test_display_code_and_end_time(self) -> None:
        booking = make_booking("0123456789abcdef", time="13:00", duration_hours=2)

        public = booking.to_public_dict()

        assert booking.display_code == "BKABCDEF"
        assert public["display_code"] == "BKABCDEF"
        assert public["end_time"] == "15:00"
        assert public["status"] == "pending"
        assert public["date"] == "2026-03-09"

    def test_roles(self) -> None:
        booking = make_booking("bk-roles")

        assert booking.role_of(PROVIDER_ID) == PartyRole.PROVIDER
        assert booking.role_of(REQUESTER_ID) == PartyRole.REQUESTER
        assert booking.role_of("stranger") is None
        assert booking.counterpart_of(PartyRole.PROVIDER).user_id == REQUESTER_ID

    def test_occupying_follows_status(self) -> None:
        assert make_booking("a", status=BookingStatus.CONFIRMED).is_occupying
        assert not make_booking("b", status=BookingStatus.RESCHEDULED).is_occupying
        assert not make_booking("c", status=BookingStatus.CANCELLED).is_occupying

    def test_snapshot_phone_defaults_to_placeholder(self) -> None:
        snapshot = PartySnapshot.from_profile(make_requester(phone="   "))

        assert snapshot.phone == UNKNOWN_PHONE


class TestSideEffects:
    def test_intent_id_is_deterministic(self) -> None:
        booking = make_booking("bk-1").model_copy(update={"version": 3})

        first = booking_pending_notice(booking)
        second = booking_pending_notice(booking)

        assert first.intent_id == second.intent_id == f"bk-1:3:booking_pending:{PROVIDER_ID}"
        assert first.notice_type == NoticeType.BOOKING_PENDING

    def test_refund_notice_depends_on_refund(self) -> None:
        booking = make_booking("bk-2").model_copy(update={"version": 2})
        refund = refund_requested(booking, "pay-1", "rejected by provider")

        notice = refund_processed_notice(booking, refund)

        assert refund.intent_id == f"bk-2:2:refund_requested:{REQUESTER_ID}"
        assert notice.depends_on == refund.intent_id
        assert notice.recipient_id == REQUESTER_ID
        assert notice.payload["amount"] == booking.amount
        assert "amount" in refund.to_log_dict()


class TestErrors:
    def test_error_to_dict(self) -> None:
        error = ValidationError({"time": "obrigatório", "date": "inválido"})

        data = error.to_dict()

        assert data["kind"] == "validation"
        assert data["details"] == {"fields": {"time": "obrigatório", "date": "inválido"}}
        assert "date, time" in data["message"]

    def test_conflict_details(self) -> None:
        error = SlotConflict(PROVIDER_ID, "2026-03-09", "14:00 - 15:00", ["bk-1"])

        assert error.kind == "slot_conflict"
        assert error.details["conflicting_booking_ids"] == ["bk-1"]

    def test_dependency_failure_reason(self) -> None:
        error = DependencyFailure("booking_store", "update", "version_conflict")

        assert error.details["reason"] == "version_conflict"
