"""
Módulo FSM — Máquina de estados do ciclo de vida de reservas.

Este módulo implementa a FSM determinística que governa as
transições de status de uma reserva (booking).

Estrutura:
    - states/: Status da reserva (BookingStatus enum)
    - transitions/: Grafos de transição (VALID_TRANSITIONS, RESCHEDULE_TRANSITIONS)
    - rules/: Guards e invariantes
    - manager/: Máquina de estados (BookingStateMachine)
    - types/: Tipos de dados (StatusTransition, TransitionResult)
"""

# Manager
from fsm.manager import (
    INITIAL_STATUSES,
    BookingStateMachine,
    create_booking_fsm,
)

# Guards/Rules
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)

# Status
from fsm.states import (
    DEFAULT_INITIAL_STATUS,
    OCCUPYING_STATUSES,
    TERMINAL_STATUSES,
    BookingStatus,
    is_occupying,
    is_terminal,
    is_valid_status,
    parse_status,
)

# Transições
from fsm.transitions import (
    RESCHEDULE_TRANSITIONS,
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)

# Types
from fsm.types import (
    StatusTransition,
    TransitionResult,
)

__all__ = [
    "DEFAULT_INITIAL_STATUS",
    "INITIAL_STATUSES",
    "OCCUPYING_STATUSES",
    "RESCHEDULE_TRANSITIONS",
    "TERMINAL_STATUSES",
    "VALID_TRANSITIONS",
    "BookingStateMachine",
    "BookingStatus",
    "GuardResult",
    "StatusTransition",
    "TransitionResult",
    "create_booking_fsm",
    "evaluate_guards",
    "get_valid_targets",
    "is_occupying",
    "is_terminal",
    "is_transition_valid",
    "is_valid_status",
    "parse_status",
    "validate_transition_map",
]
