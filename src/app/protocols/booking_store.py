"""Contrato de persistência de reservas (async).

O store é o único estado mutável compartilhado do core. A atomicidade
de ler-checar-escrever por (provider, data) é garantida por
`calendar_lock`; escritas de atualização são condicionadas à versão.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from utils.errors import StaleBookingError

if TYPE_CHECKING:
    import datetime as dt
    from contextlib import AbstractAsyncContextManager

    from app.domain.booking import Booking
    from app.domain.parties import PartyRole


class BookingStoreProtocol(ABC):
    """Contrato mínimo assíncrono para armazenamento de Booking."""

    @abstractmethod
    async def find_occupying(
        self,
        provider_id: str,
        date: dt.date,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        """Reservas pending/confirmed do provider no dia (exceto `exclude_id`)."""

    @abstractmethod
    async def get(self, booking_id: str) -> Booking | None: ...

    @abstractmethod
    async def insert(self, booking: Booking) -> Booking:
        """Persiste nova reserva; define created_at/updated_at e version=1."""

    @abstractmethod
    async def update(self, booking: Booking, expected_version: int) -> Booking:
        """Substitui a reserva se a versão armazenada for `expected_version`.

        Raises:
            StaleBookingError: Se a versão armazenada mudou.
        """

    @abstractmethod
    async def list_for_party(self, role: PartyRole, user_id: str) -> list[Booking]:
        """Reservas em que `user_id` é provider/requester, mais recentes primeiro."""

    @abstractmethod
    def calendar_lock(
        self, provider_id: str, date: dt.date
    ) -> AbstractAsyncContextManager[None]:
        """Exclusão mútua sobre o calendário de um provider em um dia."""


__all__ = ["BookingStoreProtocol", "StaleBookingError"]
