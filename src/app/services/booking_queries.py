"""Consultas de leitura: disponibilidade do provider e listagens paginadas."""

from __future__ import annotations

import datetime as dt
import math
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.domain.errors import ValidationError
from app.domain.parties import PartyRole
from app.services._booking_helpers import (
    STORE,
    call_dependency,
    resolve_party,
    resolve_timeout,
)
from app.services.availability_engine import day_of_week, free_slots
from app.services.booking_horizon import today_utc
from fsm import BookingStatus, parse_status

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.booking import Booking
    from app.domain.interval import Interval
    from app.protocols.booking_store import BookingStoreProtocol
    from app.protocols.identity_directory import IdentityDirectoryProtocol
    from config.settings.booking import BookingSettings

MAX_PAGE_SIZE = 100
ALL_STATUSES = "all"
ALL_DATES = "all"

# Dias para trás a partir de hoje (UTC), inclusive nas duas pontas
DATE_FILTER_DAYS = {"today": 0, "week": 7, "month": 30}


@dataclass(frozen=True, slots=True)
class AvailabilityView:
    """Slots livres de um provider em uma data."""

    provider_id: str
    date: dt.date
    day_of_week: str
    slots: tuple[Interval, ...] = ()

    @property
    def labels(self) -> list[str]:
        return [slot.to_label() for slot in self.slots]

    def to_dict(self) -> dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "date": self.date.isoformat(),
            "day_of_week": self.day_of_week,
            "available": bool(self.slots),
            "slots": [
                {"label": s.to_label(), "start": s.start_label, "end": s.end_label}
                for s in self.slots
            ],
        }


@dataclass(frozen=True, slots=True)
class BookingPage:
    """Página de reservas de uma parte, mais recentes primeiro."""

    bookings: tuple[Booking, ...]
    current: int
    total_pages: int
    count: int
    stats: dict[str, int] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "bookings": [b.to_public_dict() for b in self.bookings],
            "pagination": {
                "current": self.current,
                "total_pages": self.total_pages,
                "count": self.count,
            },
        }
        if self.stats is not None:
            data["stats"] = self.stats
        return data


def _matches_search(booking: Booking, needle: str) -> bool:
    haystack = (booking.requester.name, booking.requester.email, booking.subject)
    return any(needle in value.casefold() for value in haystack)


def date_window(date_filter: str, today: dt.date) -> tuple[dt.date, dt.date]:
    """Intervalo [início, hoje] de datas de reserva para `today`, `week` ou `month`."""
    return today - dt.timedelta(days=DATE_FILTER_DAYS[date_filter]), today


def status_stats(bookings: list[Booking]) -> dict[str, int]:
    """Contagem total e por status (todos os status, inclusive zero)."""
    counts = Counter(b.status for b in bookings)
    stats = {"total": len(bookings)}
    stats.update({status.value: counts.get(status, 0) for status in BookingStatus})
    return stats


class BookingQueries:
    """Leituras sem efeito colateral; nenhuma delas segura lock de calendário."""

    def __init__(
        self,
        *,
        store: BookingStoreProtocol,
        identity: IdentityDirectoryProtocol,
        settings: BookingSettings,
        today: Callable[[], dt.date] = today_utc,
    ) -> None:
        self._store = store
        self._identity = identity
        self._settings = settings
        self._today = today

    async def get_availability(
        self,
        provider_id: str,
        date: dt.date | str,
        *,
        timeout: float | None = None,
    ) -> AvailabilityView:
        """Slots livres do provider na data (lista vazia = indisponível)."""
        limit = resolve_timeout(timeout, self._settings.operation_timeout_seconds)
        day = _parse_date(date)
        provider = await resolve_party(self._identity, provider_id, PartyRole.PROVIDER, limit)
        occupying = await call_dependency(
            STORE, "find_occupying", self._store.find_occupying(provider_id, day), limit
        )
        slots = free_slots(
            provider.availability,
            day,
            [b.interval for b in occupying],
            slot_minutes=self._settings.slot_minutes,
        )
        return AvailabilityView(
            provider_id=provider_id,
            date=day,
            day_of_week=day_of_week(day),
            slots=tuple(slots),
        )

    async def list_bookings(
        self,
        actor_id: str,
        role: PartyRole | str,
        *,
        status: str | None = None,
        search: str | None = None,
        date_filter: str | None = None,
        page: int = 1,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> BookingPage:
        """Reservas do ator no papel dado, filtradas e paginadas.

        `date_filter` (`today`, `week`, `month`) olha para trás a partir
        de hoje em UTC. Estatísticas por status acompanham a listagem do
        provider e ignoram os filtros.
        """
        party_role, status_filter, page_size = self._validate_listing(
            role, status, date_filter, page, limit
        )
        everything = await call_dependency(
            STORE,
            "list_for_party",
            self._store.list_for_party(party_role, actor_id),
            resolve_timeout(timeout, self._settings.operation_timeout_seconds),
        )

        selected = everything
        if status_filter is not None:
            selected = [b for b in selected if b.status == status_filter]
        if date_filter and date_filter != ALL_DATES:
            first, last = date_window(date_filter, self._today())
            selected = [b for b in selected if first <= b.date <= last]
        needle = (search or "").strip().casefold()
        if needle and party_role == PartyRole.PROVIDER:
            selected = [b for b in selected if _matches_search(b, needle)]

        count = len(selected)
        start = (page - 1) * page_size
        return BookingPage(
            bookings=tuple(selected[start : start + page_size]),
            current=page,
            total_pages=math.ceil(count / page_size),
            count=count,
            stats=status_stats(everything) if party_role == PartyRole.PROVIDER else None,
        )

    def _validate_listing(
        self,
        role: PartyRole | str,
        status: str | None,
        date_filter: str | None,
        page: int,
        limit: int | None,
    ) -> tuple[PartyRole, BookingStatus | None, int]:
        fields: dict[str, str] = {}
        party_role: PartyRole | None = None
        try:
            party_role = PartyRole(role)
        except ValueError:
            fields["role"] = "deve ser provider ou requester"

        status_filter: BookingStatus | None = None
        if status and status != ALL_STATUSES:
            status_filter = parse_status(status)
            if status_filter is None:
                fields["status"] = f"status desconhecido: {status!r}"

        if date_filter and date_filter != ALL_DATES and date_filter not in DATE_FILTER_DAYS:
            fields["date_filter"] = "deve ser all, today, week ou month"

        if page < 1:
            fields["page"] = "deve ser >= 1"
        page_size = limit if limit is not None else self._settings.default_page_size
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            fields["limit"] = f"deve estar entre 1 e {MAX_PAGE_SIZE}"

        if fields or party_role is None:
            raise ValidationError(fields)
        return party_role, status_filter, page_size


def _parse_date(value: dt.date | str) -> dt.date:
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError({"date": "data deve estar no formato YYYY-MM-DD"}) from exc


__all__ = [
    "ALL_STATUSES",
    "MAX_PAGE_SIZE",
    "AvailabilityView",
    "BookingPage",
    "BookingQueries",
    "status_stats",
]
