"""Contrato do colaborador de entrega de avisos."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from app.domain.side_effects import Notice


@runtime_checkable
class NotificationSenderProtocol(Protocol):
    """Entrega fire-and-forget de avisos (socket/push/email é do colaborador)."""

    async def deliver(self, notice: Notice, *, realtime: bool) -> None:
        """Entrega o aviso; `realtime` indica destinatário online."""
        ...
