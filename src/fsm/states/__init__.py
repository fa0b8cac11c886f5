"""
Exports públicos do módulo fsm/states.

Status canônicos do ciclo de vida de uma reserva.
"""

from fsm.states.booking import (
    DEFAULT_INITIAL_STATUS,
    OCCUPYING_STATUSES,
    TERMINAL_STATUSES,
    BookingStatus,
    is_occupying,
    is_terminal,
    is_valid_status,
    parse_status,
)

__all__ = [
    "DEFAULT_INITIAL_STATUS",
    "OCCUPYING_STATUSES",
    "TERMINAL_STATUSES",
    "BookingStatus",
    "is_occupying",
    "is_terminal",
    "is_valid_status",
    "parse_status",
]
