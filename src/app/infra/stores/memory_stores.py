"""Stores em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios
e locks válidos só dentro de um processo/event loop.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import itertools
import time
import weakref
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from app.domain.booking import Booking
from app.domain.parties import PartyRole
from app.protocols.booking_store import BookingStoreProtocol
from app.protocols.side_effect_ledger import SideEffectLedgerProtocol
from utils.errors import StaleBookingError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


def _utcnow() -> dt.datetime:
    return dt.datetime.now(tz=dt.UTC)


class MemoryBookingStore(BookingStoreProtocol):
    """Store de reservas em memória — apenas para dev/test.

    Guarda JSON serializado para que cópias devolvidas nunca compartilhem
    estado com o store.
    """

    def __init__(self) -> None:
        self._bookings: dict[str, tuple[int, str]] = {}  # booking_id -> (seq, json)
        # Lock some quando nenhuma operação o referencia mais
        self._locks: weakref.WeakValueDictionary[tuple[str, dt.date], asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._seq = itertools.count()

    def _load(self, booking_id: str) -> Booking | None:
        entry = self._bookings.get(booking_id)
        if entry is None:
            return None
        return Booking.model_validate_json(entry[1])

    def _all(self) -> list[tuple[int, Booking]]:
        return [
            (seq, Booking.model_validate_json(data)) for seq, data in self._bookings.values()
        ]

    async def find_occupying(
        self,
        provider_id: str,
        date: dt.date,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        return [
            booking
            for _, booking in sorted(self._all(), key=lambda item: item[0])
            if booking.provider_id == provider_id
            and booking.date == date
            and booking.is_occupying
            and booking.booking_id != exclude_id
        ]

    async def get(self, booking_id: str) -> Booking | None:
        return self._load(booking_id)

    async def insert(self, booking: Booking) -> Booking:
        if booking.booking_id in self._bookings:
            raise ValueError(f"Reserva já existe: {booking.booking_id}")
        now = _utcnow()
        stored = booking.model_copy(update={"created_at": now, "updated_at": now, "version": 1})
        self._bookings[stored.booking_id] = (next(self._seq), stored.model_dump_json())
        return stored

    async def update(self, booking: Booking, expected_version: int) -> Booking:
        entry = self._bookings.get(booking.booking_id)
        if entry is None:
            raise StaleBookingError(booking.booking_id, expected_version)
        seq, data = entry
        current = Booking.model_validate_json(data)
        if current.version != expected_version:
            raise StaleBookingError(booking.booking_id, expected_version)
        stored = booking.model_copy(
            update={
                "created_at": current.created_at,
                "updated_at": _utcnow(),
                "version": expected_version + 1,
            }
        )
        self._bookings[stored.booking_id] = (seq, stored.model_dump_json())
        return stored

    async def list_for_party(self, role: PartyRole, user_id: str) -> list[Booking]:
        def owner(booking: Booking) -> str:
            return booking.provider_id if role == PartyRole.PROVIDER else booking.requester_id

        matches = [(seq, b) for seq, b in self._all() if owner(b) == user_id]
        matches.sort(key=lambda item: (item[1].created_at or _utcnow(), item[0]), reverse=True)
        return [booking for _, booking in matches]

    @asynccontextmanager
    async def calendar_lock(self, provider_id: str, date: dt.date) -> AsyncIterator[None]:
        key = (provider_id, date)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        async with lock:
            yield

    def clear(self) -> None:
        """Remove todas as reservas (apenas para testes)."""
        self._bookings.clear()


class MemorySideEffectLedger(SideEffectLedgerProtocol):
    """Ledger de idempotência em memória — apenas para dev/test."""

    def __init__(self) -> None:
        self._entries: dict[str, float] = {}  # intent_id -> expires_at

    def _cleanup_expired(self) -> None:
        """Remove entradas expiradas."""
        now = time.time()
        expired = [k for k, v in self._entries.items() if v < now]
        for k in expired:
            del self._entries[k]

    async def claim(self, intent_id: str, ttl: int) -> bool:
        self._cleanup_expired()
        if intent_id in self._entries:
            return False
        self._entries[intent_id] = time.time() + ttl
        return True

    async def mark_done(self, intent_id: str, ttl: int) -> None:
        self._entries[intent_id] = time.time() + ttl

    async def release(self, intent_id: str) -> None:
        self._entries.pop(intent_id, None)
