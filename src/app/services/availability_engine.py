"""Motor de disponibilidade: slots livres de um provider em uma data.

Funções puras sobre dados recebidos; nenhum estado compartilhado.
Dia da semana é calculado só pela data de calendário (política UTC),
nunca pelo fuso local do servidor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.domain.interval import Interval, parse_clock, parse_slot_label
from app.domain.parties import WEEKDAY_NAMES

if TYPE_CHECKING:
    import datetime as dt
    from collections.abc import Iterable, Sequence

    from app.domain.parties import AvailabilityWindow

DEFAULT_SLOT_MINUTES = 60


def day_of_week(date: dt.date) -> str:
    """Nome do dia da semana (inglês, minúsculo) da data de calendário."""
    return WEEKDAY_NAMES[date.weekday()]


def window_slots(
    window: AvailabilityWindow,
    *,
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> list[Interval]:
    """Slots candidatos de uma janela.

    Rótulos explícitos são usados como estão (ordem mantida). Sem rótulos,
    gera slots de largura fixa em [start_time, end_time), descartando o
    último slot parcial.
    """
    if window.slots:
        return [parse_slot_label(label, default_minutes=slot_minutes) for label in window.slots]

    if window.start_time is None or window.end_time is None:
        raise ValueError(f"janela de {window.day_of_week} sem horário nem slots")
    start = parse_clock(window.start_time)
    end = parse_clock(window.end_time)
    return [
        Interval(start=cursor, end=cursor + slot_minutes)
        for cursor in range(start, end - slot_minutes + 1, slot_minutes)
    ]


def free_slots(
    windows: Iterable[AvailabilityWindow],
    date: dt.date,
    occupied: Sequence[Interval],
    *,
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> list[Interval]:
    """Slots livres do dia, na ordem das janelas.

    Um slot é descartado se sobrepõe qualquer intervalo ocupado.
    Lista vazia é resultado válido (provider indisponível no dia).
    """
    weekday = day_of_week(date)
    result: list[Interval] = []
    for window in windows:
        if window.day_of_week != weekday:
            continue
        for slot in window_slots(window, slot_minutes=slot_minutes):
            if any(slot.overlaps(busy) for busy in occupied):
                continue
            result.append(slot)
    return result


def is_interval_free(
    candidate: Interval,
    windows: Iterable[AvailabilityWindow],
    date: dt.date,
    occupied: Sequence[Interval],
    *,
    slot_minutes: int = DEFAULT_SLOT_MINUTES,
) -> bool:
    """True se `candidate` é coberto por slots livres contíguos do dia."""
    cursor = candidate.start
    for slot in sorted(free_slots(windows, date, occupied, slot_minutes=slot_minutes)):
        if slot.start <= cursor < slot.end:
            cursor = slot.end
        if cursor >= candidate.end:
            return True
    return False


__all__ = [
    "DEFAULT_SLOT_MINUTES",
    "day_of_week",
    "free_slots",
    "is_interval_free",
    "window_slots",
]
