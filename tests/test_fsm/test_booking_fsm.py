"""
Testes do módulo FSM de reservas.

Cobrem comportamento e contrato público: estados, grafos de transição,
guards e a máquina efêmera usada pelo BookingService.
"""

from __future__ import annotations

import pytest

import fsm.manager.machine as machine_module
from fsm import (
    DEFAULT_INITIAL_STATUS,
    INITIAL_STATUSES,
    OCCUPYING_STATUSES,
    RESCHEDULE_TRANSITIONS,
    TERMINAL_STATUSES,
    VALID_TRANSITIONS,
    BookingStateMachine,
    BookingStatus,
    GuardResult,
    StatusTransition,
    TransitionResult,
    create_booking_fsm,
    evaluate_guards,
    get_valid_targets,
    is_occupying,
    is_terminal,
    is_transition_valid,
    is_valid_status,
    parse_status,
    validate_transition_map,
)


class TestBookingStatus:
    """Enum, conjuntos derivados e parse de status externo."""

    def test_terminal_and_occupying_sets(self) -> None:
        assert TERMINAL_STATUSES == {BookingStatus.COMPLETED, BookingStatus.CANCELLED}
        assert OCCUPYING_STATUSES == {BookingStatus.PENDING, BookingStatus.CONFIRMED}
        assert DEFAULT_INITIAL_STATUS == BookingStatus.PENDING
        assert INITIAL_STATUSES == {BookingStatus.PENDING}

        assert is_terminal(BookingStatus.CANCELLED)
        assert not is_terminal(BookingStatus.RESCHEDULED)
        assert is_occupying(BookingStatus.CONFIRMED)
        # Reagendada aguarda nova confirmação e não bloqueia a agenda
        assert not is_occupying(BookingStatus.RESCHEDULED)

    def test_status_values_are_stable_strings(self) -> None:
        assert [s.value for s in BookingStatus] == [
            "pending",
            "confirmed",
            "rescheduled",
            "completed",
            "cancelled",
        ]
        assert str(BookingStatus.CONFIRMED) == "confirmed"

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("confirmed", BookingStatus.CONFIRMED),
            (" CANCELLED ", BookingStatus.CANCELLED),
            ("approved", None),
            ("", None),
        ],
    )
    def test_parse_status(self, raw: str, expected: BookingStatus | None) -> None:
        assert parse_status(raw) == expected

    def test_is_valid_status_rejects_plain_strings(self) -> None:
        assert is_valid_status(BookingStatus.PENDING)
        assert not is_valid_status("pending")


class TestTransitionGraphs:
    """Grafo de mudanças de status e grafo de reagendamento."""

    def test_valid_transitions_match_lifecycle_table(self) -> None:
        assert VALID_TRANSITIONS[BookingStatus.PENDING] == {
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
        }
        assert VALID_TRANSITIONS[BookingStatus.CONFIRMED] == {
            BookingStatus.COMPLETED,
            BookingStatus.CANCELLED,
            BookingStatus.RESCHEDULED,
        }
        assert VALID_TRANSITIONS[BookingStatus.RESCHEDULED] == {
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
        }
        assert get_valid_targets(BookingStatus.COMPLETED) == frozenset()
        assert get_valid_targets(BookingStatus.CANCELLED) == frozenset()

    def test_both_maps_are_consistent(self) -> None:
        assert validate_transition_map() == []
        assert validate_transition_map(RESCHEDULE_TRANSITIONS) == []

    def test_validate_transition_map_reports_problems(self) -> None:
        broken = {
            BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED}),
            BookingStatus.COMPLETED: frozenset({BookingStatus.PENDING}),
        }
        errors = validate_transition_map(broken)

        assert any("CONFIRMED ausente" in e for e in errors)
        assert any("terminal COMPLETED" in e for e in errors)

    def test_pending_to_completed_is_invalid(self) -> None:
        assert not is_transition_valid(BookingStatus.PENDING, BookingStatus.COMPLETED)

    def test_reschedule_graph_only_from_pending_or_confirmed(self) -> None:
        sources = {
            status
            for status in BookingStatus
            if is_transition_valid(status, BookingStatus.RESCHEDULED, RESCHEDULE_TRANSITIONS)
        }
        assert sources == {BookingStatus.PENDING, BookingStatus.CONFIRMED}


class TestGuards:
    def test_guards_deny_terminal_and_reflexive(self) -> None:
        terminal = evaluate_guards(BookingStatus.CANCELLED, BookingStatus.CONFIRMED)
        reflexive = evaluate_guards(BookingStatus.PENDING, BookingStatus.PENDING)

        assert terminal.allowed is False
        assert "terminal" in (terminal.reason or "")
        assert reflexive.allowed is False
        assert evaluate_guards(BookingStatus.PENDING, BookingStatus.CONFIRMED).allowed

    def test_custom_guard_list(self) -> None:
        def _always_deny(from_status: BookingStatus, to_status: BookingStatus) -> GuardResult:
            del from_status, to_status
            return GuardResult.deny("nope")

        result = evaluate_guards(
            BookingStatus.PENDING, BookingStatus.CONFIRMED, guards=[_always_deny]
        )
        assert result.allowed is False
        assert result.reason == "nope"


class TestBookingStateMachine:
    def test_successful_transition_records_history(self) -> None:
        machine = create_booking_fsm("bk-1")

        result = machine.transition(
            BookingStatus.CONFIRMED,
            trigger="change_status",
            actor_role="provider",
            metadata={"booking_id": "bk-1"},
        )

        assert result.success is True
        assert isinstance(result.transition, StatusTransition)
        assert machine.current_status == BookingStatus.CONFIRMED
        assert machine.history[0].to_log_dict()["actor_role"] == "provider"
        assert machine.get_status_summary()["valid_targets"] == [
            "cancelled",
            "completed",
            "rescheduled",
        ]

    def test_invalid_transition_leaves_status_unchanged(self) -> None:
        machine = BookingStateMachine(BookingStatus.PENDING, booking_id="bk-2")

        result = machine.transition(BookingStatus.COMPLETED, trigger="change_status")

        assert result.success is False
        assert "pending → completed" in (result.error_reason or "")
        assert machine.current_status == BookingStatus.PENDING
        assert machine.history == []

    def test_reschedule_uses_its_own_graph(self) -> None:
        pending = create_booking_fsm("bk-3", BookingStatus.PENDING)
        rescheduled = create_booking_fsm("bk-4", BookingStatus.RESCHEDULED)

        assert pending.reschedule(actor_role="requester").success is True
        assert pending.current_status == BookingStatus.RESCHEDULED
        assert rescheduled.reschedule(actor_role="requester").success is False

    def test_guard_denial_blocks_valid_transition(self, monkeypatch) -> None:
        def _deny_guard(from_status: BookingStatus, to_status: BookingStatus) -> GuardResult:
            del from_status, to_status
            return GuardResult.deny("blocked_by_guard")

        monkeypatch.setattr(machine_module, "evaluate_guards", _deny_guard)
        machine = create_booking_fsm("bk-5")

        result = machine.transition(BookingStatus.CONFIRMED, trigger="test")

        assert result.success is False
        assert result.error_reason == "blocked_by_guard"
        assert machine.current_status == BookingStatus.PENDING


class TestTransitionTypes:
    def test_transition_requires_trigger(self) -> None:
        with pytest.raises(ValueError, match="trigger"):
            StatusTransition(
                from_status=BookingStatus.PENDING,
                to_status=BookingStatus.CONFIRMED,
                trigger="  ",
            )

    def test_result_consistency(self) -> None:
        with pytest.raises(ValueError):
            TransitionResult(success=True)
        with pytest.raises(ValueError):
            TransitionResult(success=False)
