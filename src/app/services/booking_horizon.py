"""Janela de antecedência para criação e reagendamento.

Data válida: estritamente depois de hoje (UTC) e no máximo
`horizon_days` à frente.
"""

from __future__ import annotations

import datetime as dt

from app.domain.errors import HorizonViolation

DEFAULT_HORIZON_DAYS = 90


def today_utc(now: dt.datetime | None = None) -> dt.date:
    return (now or dt.datetime.now(tz=dt.UTC)).astimezone(dt.UTC).date()


def is_within_horizon(
    date: dt.date,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    today: dt.date | None = None,
) -> bool:
    base = today or today_utc()
    return base < date <= base + dt.timedelta(days=horizon_days)


def ensure_within_horizon(
    date: dt.date,
    *,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
    today: dt.date | None = None,
) -> None:
    """Levanta HorizonViolation se a data estiver fora da janela."""
    if not is_within_horizon(date, horizon_days=horizon_days, today=today):
        raise HorizonViolation(date.isoformat(), horizon_days)


__all__ = [
    "DEFAULT_HORIZON_DAYS",
    "ensure_within_horizon",
    "is_within_horizon",
    "today_utc",
]
