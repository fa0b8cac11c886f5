"""Settings dos colaboradores HTTP (identidade, pagamento, notificação)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings


@dataclass(frozen=True)
class CollaboratorSettings:
    """Endpoints dos colaboradores externos.

    URLs vazias em development ativam colaboradores em memória.

    Attributes:
        identity_base_url: Serviço de perfis de usuário
        payment_base_url: Serviço de pagamentos/estornos
        notification_base_url: Serviço de entrega de avisos
        presence_base_url: Serviço de presença (opcional)
        api_token: Bearer token enviado aos colaboradores
        http_timeout_seconds: Timeout por requisição HTTP
    """

    identity_base_url: str = ""
    payment_base_url: str = ""
    notification_base_url: str = ""
    presence_base_url: str = ""
    api_token: str = ""
    http_timeout_seconds: float = 5.0

    @property
    def uses_http(self) -> bool:
        return bool(self.identity_base_url)

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de colaboradores.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []
        if not base.is_development:
            for name, value in (
                ("IDENTITY_BASE_URL", self.identity_base_url),
                ("PAYMENT_BASE_URL", self.payment_base_url),
                ("NOTIFICATION_BASE_URL", self.notification_base_url),
            ):
                if not value:
                    errors.append(f"{name} é obrigatório em staging/production")
        for name, value in (
            ("IDENTITY_BASE_URL", self.identity_base_url),
            ("PAYMENT_BASE_URL", self.payment_base_url),
            ("NOTIFICATION_BASE_URL", self.notification_base_url),
            ("PRESENCE_BASE_URL", self.presence_base_url),
        ):
            if value and not value.startswith(("http://", "https://")):
                errors.append(f"{name} deve começar com http:// ou https://")
        if self.http_timeout_seconds <= 0:
            errors.append("COLLABORATOR_HTTP_TIMEOUT_SECONDS deve ser > 0")
        return errors


def _load_collaborators_from_env() -> CollaboratorSettings:
    """Carrega CollaboratorSettings de variáveis de ambiente."""
    return CollaboratorSettings(
        identity_base_url=os.getenv("IDENTITY_BASE_URL", "").rstrip("/"),
        payment_base_url=os.getenv("PAYMENT_BASE_URL", "").rstrip("/"),
        notification_base_url=os.getenv("NOTIFICATION_BASE_URL", "").rstrip("/"),
        presence_base_url=os.getenv("PRESENCE_BASE_URL", "").rstrip("/"),
        api_token=os.getenv("COLLABORATOR_API_TOKEN", ""),
        http_timeout_seconds=float(os.getenv("COLLABORATOR_HTTP_TIMEOUT_SECONDS", "5")),
    )


@lru_cache(maxsize=1)
def get_collaborator_settings() -> CollaboratorSettings:
    """Retorna instância cacheada de CollaboratorSettings."""
    return _load_collaborators_from_env()


__all__ = ["CollaboratorSettings", "get_collaborator_settings"]
