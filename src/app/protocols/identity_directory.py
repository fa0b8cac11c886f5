"""Contrato do colaborador de identidade."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.parties import UserProfile


@runtime_checkable
class IdentityDirectoryProtocol(Protocol):
    """Resolve perfis de usuário (papel, contato, tarifa, disponibilidade)."""

    async def resolve_user(self, user_id: str) -> UserProfile | None:
        """Retorna o perfil ou None se o id não existir."""
        ...
