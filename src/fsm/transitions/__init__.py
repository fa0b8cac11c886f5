"""
Exports públicos do módulo fsm/transitions.

Grafos de transição entre status de reserva.
"""

from fsm.transitions.rules import (
    RESCHEDULE_TRANSITIONS,
    VALID_TRANSITIONS,
    TransitionMap,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)

__all__ = [
    "RESCHEDULE_TRANSITIONS",
    "VALID_TRANSITIONS",
    "TransitionMap",
    "get_valid_targets",
    "is_transition_valid",
    "validate_transition_map",
]
