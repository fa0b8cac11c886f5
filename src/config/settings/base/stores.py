"""Settings de persistência de reservas e do ledger de side effects."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

StoreBackend = Literal["memory", "redis"]

_VALID_BACKENDS = ("memory", "redis")


@dataclass(frozen=True)
class StoreSettings:
    """Configurações dos stores.

    Attributes:
        backend: Backend de reservas e ledger (memory|redis)
        key_prefix: Prefixo das chaves Redis
    """

    backend: StoreBackend = "memory"
    key_prefix: str = "booking"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de store.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in _VALID_BACKENDS:
            errors.append(f"STORE_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append(
                "STORE_BACKEND=memory proibido em staging/production. Use Redis."
            )

        if self.backend == "redis" and not base.redis_url:
            errors.append("STORE_BACKEND=redis requer REDIS_URL configurado")

        if not self.key_prefix:
            errors.append("STORE_KEY_PREFIX não pode ser vazio")

        return errors


def _load_store_from_env() -> StoreSettings:
    """Carrega StoreSettings de variáveis de ambiente."""
    backend_str = os.getenv("STORE_BACKEND", "memory").lower()
    backend: StoreBackend = backend_str if backend_str in _VALID_BACKENDS else "memory"
    return StoreSettings(
        backend=backend,
        key_prefix=os.getenv("STORE_KEY_PREFIX", "booking"),
    )


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Retorna instância cacheada de StoreSettings."""
    return _load_store_from_env()
