"""
Status canônicos do ciclo de vida de uma reserva (booking).

Este módulo define os status que uma reserva pode assumir entre a
criação pelo solicitante e o encerramento (conclusão ou cancelamento).
Os valores são strings estáveis, persistidas como estão no store.
"""

from enum import StrEnum


class BookingStatus(StrEnum):
    """
    Status canônicos de uma reserva.

    Status não-terminais:
        - PENDING: Criada pelo solicitante, aguardando o prestador
        - CONFIRMED: Aceita; ocupa o horário na agenda do prestador
        - RESCHEDULED: Movida para nova data/hora; exige nova confirmação

    Status terminais:
        - COMPLETED: Atendimento realizado
        - CANCELLED: Cancelada por uma das partes (nunca removida fisicamente)
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    RESCHEDULED = "rescheduled"

    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


# Uma vez em status terminal, a reserva não aceita novas transições
TERMINAL_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.COMPLETED,
    BookingStatus.CANCELLED,
})

# Status que bloqueiam o intervalo na agenda do prestador
OCCUPYING_STATUSES: frozenset[BookingStatus] = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
})

# Toda reserva nasce pendente
DEFAULT_INITIAL_STATUS: BookingStatus = BookingStatus.PENDING


def is_terminal(status: BookingStatus) -> bool:
    """
    Verifica se o status é terminal.

    Args:
        status: Status a ser verificado

    Returns:
        True se o status é terminal, False caso contrário
    """
    return status in TERMINAL_STATUSES


def is_occupying(status: BookingStatus) -> bool:
    """Verifica se o status ocupa o horário na agenda."""
    return status in OCCUPYING_STATUSES


def is_valid_status(status: object) -> bool:
    """
    Verifica se o valor é um status válido do enum.

    Args:
        status: Valor a ser verificado

    Returns:
        True se é um BookingStatus válido
    """
    return isinstance(status, BookingStatus)


def parse_status(value: str) -> BookingStatus | None:
    """Converte string externa em BookingStatus; None se desconhecida."""
    try:
        return BookingStatus(value.strip().lower())
    except ValueError:
        return None
