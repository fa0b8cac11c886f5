"""Contrato de rastreamento de presença (usuários conectados)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PresenceTrackerProtocol(Protocol):
    """Consultado só pelo dispatcher para escolher entrega imediata ou adiada."""

    async def is_online(self, user_id: str) -> bool: ...
