"""
Exports públicos do módulo fsm/manager.

Máquina de estados (BookingStateMachine) do ciclo de vida de reservas.
"""

from fsm.manager.machine import (
    INITIAL_STATUSES,
    BookingStateMachine,
    create_booking_fsm,
)

__all__ = [
    "INITIAL_STATUSES",
    "BookingStateMachine",
    "create_booking_fsm",
]
