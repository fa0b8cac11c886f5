"""Detecção de conflito de horário entre uma reserva candidata e as ocupantes.

Chamado sempre dentro do lock de calendário (provider, data); aqui só
há a decisão pura sobre a lista já carregada do store.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from app.domain.booking import Booking
    from app.domain.interval import Interval


def find_conflicts(
    candidate: Interval,
    occupying: Iterable[Booking],
    exclude_booking_id: str | None = None,
) -> list[Booking]:
    """Reservas ocupantes cujo intervalo sobrepõe `candidate`."""
    return [
        booking
        for booking in occupying
        if booking.booking_id != exclude_booking_id
        and booking.is_occupying
        and booking.interval.overlaps(candidate)
    ]


def has_conflict(
    candidate: Interval,
    occupying: Iterable[Booking],
    exclude_booking_id: str | None = None,
) -> bool:
    """True se `candidate` sobrepõe alguma reserva ocupante."""
    return bool(find_conflicts(candidate, occupying, exclude_booking_id))


__all__ = ["find_conflicts", "has_conflict"]
