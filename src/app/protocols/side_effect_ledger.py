"""Contrato do ledger de idempotência de side effects."""

from __future__ import annotations

from abc import ABC, abstractmethod


class SideEffectLedgerProtocol(ABC):
    """Registro de intenções em execução ou já executadas.

    Métodos canônicos:
    - claim(intent_id, ttl) -> bool
      Marca a intenção como em processamento (TTL curto). Retorna False se
      já estava marcada (em processamento ou concluída).
    - mark_done(intent_id, ttl) -> None
      Converte a marca em "concluída" com TTL longo.
    - release(intent_id) -> None
      Remove a marca após falha, permitindo nova tentativa.

    Uma marca de processamento que expira (processo morreu no meio) libera
    a intenção para outra execução: entrega pelo menos uma vez.
    """

    @abstractmethod
    async def claim(self, intent_id: str, ttl: int) -> bool: ...

    @abstractmethod
    async def mark_done(self, intent_id: str, ttl: int) -> None: ...

    @abstractmethod
    async def release(self, intent_id: str) -> None: ...
