"""Redis Side-Effect Ledger — idempotência de intenções com Redis.

Usa SET NX EX para marcar uma intenção como "processing" de forma atômica
(duas réplicas do dispatcher nunca executam a mesma intenção ao mesmo
tempo). Após a execução a chave vira "done" com TTL longo; após falha
final a chave é removida.

Contrato de Keys:
    intent_id é composto de ids opacos, versão e tipo
    (`{booking_id}:{version}:{kind}:{recipient}`); nunca contém PII.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from app.protocols.side_effect_ledger import SideEffectLedgerProtocol
from utils.errors import RedisConnectionError

if TYPE_CHECKING:
    from redis.asyncio import Redis as AsyncRedis

logger = logging.getLogger(__name__)

LEDGER_PREFIX = "side_effect:"


class RedisSideEffectLedger(SideEffectLedgerProtocol):
    """Ledger de intenções usando redis.asyncio.

    Args:
        async_redis_client: Cliente Redis assíncrono
        key_prefix: Namespace das chaves
    """

    def __init__(self, async_redis_client: AsyncRedis, key_prefix: str = LEDGER_PREFIX) -> None:
        self._redis = async_redis_client
        self._prefix = key_prefix

    def _key(self, intent_id: str) -> str:
        """Gera chave Redis com namespace."""
        return f"{self._prefix}{intent_id}"

    async def claim(self, intent_id: str, ttl: int) -> bool:
        """Marca a intenção como em processamento (SET NX EX).

        Returns:
            True se reservada agora; False se já marcada (duplicada).
        """
        try:
            was_set = await self._redis.set(
                self._key(intent_id), "processing", nx=True, ex=ttl
            )
        except RedisError as exc:
            raise RedisConnectionError("Falha ao reservar intenção no Redis") from exc
        if not was_set:
            logger.debug("side_effect_duplicate_detected", extra={"intent_id": intent_id})
        return bool(was_set)

    async def release(self, intent_id: str) -> None:
        """Remove a marca após falha, permitindo nova execução."""
        try:
            await self._redis.delete(self._key(intent_id))
        except RedisError as exc:
            raise RedisConnectionError("Falha ao liberar intenção no Redis") from exc

    async def mark_done(self, intent_id: str, ttl: int) -> None:
        """Marca a intenção como concluída (sobrescreve a marca de processamento)."""
        try:
            await self._redis.set(self._key(intent_id), "done", ex=ttl)
        except RedisError as exc:
            raise RedisConnectionError("Falha ao concluir intenção no Redis") from exc
