"""Stores — implementações concretas de persistência.

Módulos disponíveis:
    - memory_stores: Reservas e ledger em memória para desenvolvimento/testes
    - redis_booking_store: Reservas em Redis (lock distribuído + WATCH/versão)
    - redis_side_effect_ledger: Ledger de idempotência em Redis (SET NX EX)
"""

from __future__ import annotations

from app.infra.stores.memory_stores import (
    MemoryBookingStore,
    MemorySideEffectLedger,
)
from app.infra.stores.redis_booking_store import RedisBookingStore
from app.infra.stores.redis_side_effect_ledger import RedisSideEffectLedger

__all__ = [
    # Memory (dev/test)
    "MemoryBookingStore",
    "MemorySideEffectLedger",
    # Redis
    "RedisBookingStore",
    "RedisSideEffectLedger",
]
