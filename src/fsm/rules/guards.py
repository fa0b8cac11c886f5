"""
Guards e invariantes para transições de status.

Guards são regras adicionais ao grafo de transições: qualquer guard
que negue bloqueia a transição, e a reserva permanece inalterada.
"""

from collections.abc import Callable

from fsm.states.booking import TERMINAL_STATUSES, BookingStatus


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[BookingStatus, BookingStatus], GuardResult]


def guard_valid_status(
    from_status: BookingStatus,
    to_status: BookingStatus,
) -> GuardResult:
    """Guard: origem e destino precisam ser BookingStatus."""
    if not isinstance(from_status, BookingStatus):
        return GuardResult.deny(f"Status de origem inválido: {from_status}")

    if not isinstance(to_status, BookingStatus):
        return GuardResult.deny(f"Status de destino inválido: {to_status}")

    return GuardResult.allow()


def guard_terminal_status(
    from_status: BookingStatus,
    to_status: BookingStatus,
) -> GuardResult:
    """
    Guard: Status terminais não permitem saída.

    Args:
        from_status: Status de origem
        to_status: Status de destino (não usado, mas necessário para assinatura)

    Returns:
        GuardResult indicando se transição é permitida
    """
    del to_status
    if from_status in TERMINAL_STATUSES:
        return GuardResult.deny(
            f"Status {from_status.name} é terminal, não permite transição"
        )
    return GuardResult.allow()


def guard_same_status(
    from_status: BookingStatus,
    to_status: BookingStatus,
) -> GuardResult:
    """Guard: reserva não transita para o próprio status."""
    if from_status == to_status:
        return GuardResult.deny(
            f"Transição reflexiva não permitida: {from_status.name} → {to_status.name}"
        )
    return GuardResult.allow()


# Aplicados em ordem; todos devem retornar allow() para a transição prosseguir
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_status,
    guard_terminal_status,
    guard_same_status,
]


def evaluate_guards(
    from_status: BookingStatus,
    to_status: BookingStatus,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_status: Status de origem
        to_status: Status de destino
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_status, to_status)
        if not result.allowed:
            return result

    return GuardResult.allow()
