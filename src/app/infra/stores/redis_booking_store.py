"""Redis Booking Store — reservas persistidas em Redis.

Layout de chaves (prefixo configurável, padrão "booking"):
    {prefix}:item:{booking_id}               JSON da reserva
    {prefix}:day:{provider_id}:{YYYY-MM-DD}  SET de ids do dia do provider
    {prefix}:party:{role}:{user_id}          ZSET de ids por created_at
    {prefix}:lock:{provider_id}:{YYYY-MM-DD} lock distribuído do calendário

Atomicidade de ler-checar-escrever por (provider, data) via lock
distribuído. Inserções e atualizações usam WATCH/MULTI sobre a chave da
reserva, com item e índices na mesma transação; atualizações comparam
`version` (escrita otimista).
"""

from __future__ import annotations

import datetime as dt
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from redis.exceptions import LockError, RedisError, WatchError

from app.domain.booking import Booking
from app.domain.parties import PartyRole
from app.protocols.booking_store import BookingStoreProtocol
from utils.errors import RedisConnectionError, StaleBookingError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "booking"


def _utcnow() -> dt.datetime:
    return dt.datetime.now(tz=dt.UTC)


class RedisBookingStore(BookingStoreProtocol):
    """Store de reservas usando redis.asyncio.

    Args:
        async_redis_client: Cliente Redis assíncrono
        key_prefix: Namespace das chaves
        lock_timeout_seconds: Lease do lock de calendário
        lock_blocking_timeout_seconds: Espera máxima para obter o lock
    """

    def __init__(
        self,
        async_redis_client: AsyncRedis,
        *,
        key_prefix: str = DEFAULT_PREFIX,
        lock_timeout_seconds: float = 10.0,
        lock_blocking_timeout_seconds: float = 5.0,
    ) -> None:
        self._redis = async_redis_client
        self._prefix = key_prefix
        self._lock_timeout = lock_timeout_seconds
        self._lock_blocking_timeout = lock_blocking_timeout_seconds

    # ──────────────────────────────────────────────────────────────
    # Chaves
    # ──────────────────────────────────────────────────────────────

    def _item_key(self, booking_id: str) -> str:
        return f"{self._prefix}:item:{booking_id}"

    def _day_key(self, provider_id: str, date: dt.date) -> str:
        return f"{self._prefix}:day:{provider_id}:{date.isoformat()}"

    def _party_key(self, role: PartyRole, user_id: str) -> str:
        return f"{self._prefix}:party:{role.value}:{user_id}"

    def _lock_key(self, provider_id: str, date: dt.date) -> str:
        return f"{self._prefix}:lock:{provider_id}:{date.isoformat()}"

    async def _load_many(self, booking_ids: list[str]) -> list[Booking]:
        if not booking_ids:
            return []
        raw_items = await self._redis.mget([self._item_key(i) for i in booking_ids])
        bookings: list[Booking] = []
        for booking_id, raw in zip(booking_ids, raw_items, strict=False):
            if raw is None:
                logger.warning("booking_index_dangling", extra={"booking_id": booking_id})
                continue
            bookings.append(Booking.model_validate_json(raw))
        return bookings

    # ──────────────────────────────────────────────────────────────
    # BookingStoreProtocol
    # ──────────────────────────────────────────────────────────────

    async def find_occupying(
        self,
        provider_id: str,
        date: dt.date,
        exclude_id: str | None = None,
    ) -> list[Booking]:
        try:
            members = await self._redis.smembers(self._day_key(provider_id, date))
            ids = sorted(m.decode() if isinstance(m, bytes) else m for m in members)
            bookings = await self._load_many([i for i in ids if i != exclude_id])
        except RedisError as exc:
            raise RedisConnectionError("Falha ao consultar reservas do dia no Redis") from exc
        return [
            b
            for b in bookings
            if b.is_occupying and b.provider_id == provider_id and b.date == date
        ]

    async def get(self, booking_id: str) -> Booking | None:
        try:
            raw = await self._redis.get(self._item_key(booking_id))
        except RedisError as exc:
            raise RedisConnectionError("Falha ao carregar reserva no Redis") from exc
        return Booking.model_validate_json(raw) if raw is not None else None

    async def insert(self, booking: Booking) -> Booking:
        now = _utcnow()
        stored = booking.model_copy(update={"created_at": now, "updated_at": now, "version": 1})
        key = self._item_key(stored.booking_id)
        score = now.timestamp()
        try:
            # Item e índices no mesmo MULTI: nada fica gravado pela metade
            async with self._redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                if await pipe.exists(key):
                    raise ValueError(f"Reserva já existe: {stored.booking_id}")
                pipe.multi()
                pipe.set(key, stored.model_dump_json())
                pipe.sadd(self._day_key(stored.provider_id, stored.date), stored.booking_id)
                pipe.zadd(
                    self._party_key(PartyRole.PROVIDER, stored.provider_id),
                    {stored.booking_id: score},
                )
                pipe.zadd(
                    self._party_key(PartyRole.REQUESTER, stored.requester_id),
                    {stored.booking_id: score},
                )
                await pipe.execute()
        except WatchError as exc:
            raise ValueError(f"Reserva já existe: {stored.booking_id}") from exc
        except RedisError as exc:
            raise RedisConnectionError("Falha ao inserir reserva no Redis") from exc
        logger.debug("booking_inserted", extra={"booking_id": stored.booking_id})
        return stored

    async def update(self, booking: Booking, expected_version: int) -> Booking:
        key = self._item_key(booking.booking_id)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                await pipe.watch(key)
                raw = await pipe.get(key)
                if raw is None:
                    raise StaleBookingError(booking.booking_id, expected_version)
                current = Booking.model_validate_json(raw)
                if current.version != expected_version:
                    raise StaleBookingError(booking.booking_id, expected_version)
                stored = booking.model_copy(
                    update={
                        "created_at": current.created_at,
                        "updated_at": _utcnow(),
                        "version": expected_version + 1,
                    }
                )
                pipe.multi()
                pipe.set(key, stored.model_dump_json())
                if current.date != stored.date:
                    pipe.srem(self._day_key(current.provider_id, current.date), stored.booking_id)
                    pipe.sadd(self._day_key(stored.provider_id, stored.date), stored.booking_id)
                await pipe.execute()
        except WatchError as exc:
            raise StaleBookingError(booking.booking_id, expected_version) from exc
        except RedisError as exc:
            raise RedisConnectionError("Falha ao atualizar reserva no Redis") from exc
        return stored

    async def list_for_party(self, role: PartyRole, user_id: str) -> list[Booking]:
        try:
            members = await self._redis.zrevrange(self._party_key(role, user_id), 0, -1)
            ids = [m.decode() if isinstance(m, bytes) else m for m in members]
            return await self._load_many(ids)
        except RedisError as exc:
            raise RedisConnectionError("Falha ao listar reservas no Redis") from exc

    @asynccontextmanager
    async def calendar_lock(self, provider_id: str, date: dt.date) -> AsyncIterator[None]:
        lock = self._redis.lock(
            self._lock_key(provider_id, date),
            timeout=self._lock_timeout,
            blocking_timeout=self._lock_blocking_timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as exc:
            raise RedisConnectionError("Falha ao obter lock de calendário no Redis") from exc
        if not acquired:
            raise RedisConnectionError("Timeout ao obter lock de calendário")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Lease expirou antes do fim da operação
                logger.warning(
                    "calendar_lock_release_failed",
                    extra={"provider_id": provider_id, "date": date.isoformat()},
                )
