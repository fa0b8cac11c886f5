"""Intervalo semiaberto [start, end) dentro de um único dia.

Resolução de minutos: `start` e `end` são offsets a partir de 00:00.
`Interval.overlaps` é o único predicado de sobreposição do sistema;
disponibilidade, detecção de conflito, criação e reagendamento usam
este mesmo método.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

MINUTES_PER_DAY = 24 * 60

_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
_SLOT_SEPARATOR = " - "


@dataclass(frozen=True, slots=True, order=True)
class Interval:
    """Faixa de horário [start, end) em minutos desde a meia-noite."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end > MINUTES_PER_DAY:
            raise ValueError(
                f"Intervalo fora do dia: [{self.start}, {self.end})"
            )
        if self.end <= self.start:
            raise ValueError(
                f"Intervalo vazio ou invertido: [{self.start}, {self.end})"
            )

    @classmethod
    def from_clock(cls, time: str, duration_hours: float) -> Interval:
        """Monta intervalo a partir de 'HH:MM' e duração em horas."""
        start = parse_clock(time)
        return cls(start=start, end=start + round(duration_hours * 60))

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start

    @property
    def start_label(self) -> str:
        return format_clock(self.start)

    @property
    def end_label(self) -> str:
        return format_clock(self.end)

    def overlaps(self, other: Interval) -> bool:
        """Sobreposição semiaberta: extremos que se tocam não conflitam."""
        return self.start < other.end and other.start < self.end

    def contains(self, other: Interval) -> bool:
        return self.start <= other.start and other.end <= self.end

    def to_label(self) -> str:
        """Rótulo de exibição no formato 'HH:MM - HH:MM'."""
        return f"{self.start_label}{_SLOT_SEPARATOR}{self.end_label}"


def is_clock(value: str) -> bool:
    """True se `value` é um horário 'HH:MM' válido (24h)."""
    return bool(_CLOCK_RE.match(value.strip())) if isinstance(value, str) else False


def parse_clock(value: str) -> int:
    """Converte 'HH:MM' em minutos desde a meia-noite.

    Raises:
        ValueError: Se o formato for inválido.
    """
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Horário inválido (esperado HH:MM): {value!r}")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_clock(minutes: int) -> str:
    """Formata minutos desde a meia-noite como 'HH:MM'."""
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"


def parse_slot_label(label: str, *, default_minutes: int = 60) -> Interval:
    """Converte rótulo de slot em Interval.

    Aceita 'HH:MM - HH:MM' ou apenas 'HH:MM' (slot de `default_minutes`).
    """
    text = label.strip()
    if _SLOT_SEPARATOR.strip() in text:
        raw_start, raw_end = (part.strip() for part in text.split("-", 1))
        return Interval(start=parse_clock(raw_start), end=parse_clock(raw_end))
    start = parse_clock(text)
    return Interval(start=start, end=start + default_minutes)


def slot_start_label(label: str) -> str:
    """Extrai o horário de início de um rótulo de slot."""
    return label.split("-", 1)[0].strip()


__all__ = [
    "MINUTES_PER_DAY",
    "Interval",
    "format_clock",
    "is_clock",
    "parse_clock",
    "parse_slot_label",
    "slot_start_label",
]
