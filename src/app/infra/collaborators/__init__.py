"""Colaboradores externos — adapters HTTP (httpx) e versões em memória."""

from __future__ import annotations

from app.infra.collaborators.http_base import CollaboratorHttpClient, CollaboratorHttpConfig
from app.infra.collaborators.http_collaborators import (
    HttpIdentityDirectory,
    HttpNotificationSender,
    HttpPaymentGateway,
    HttpPresenceTracker,
)
from app.infra.collaborators.memory_collaborators import (
    LoggingNotificationSender,
    MemoryIdentityDirectory,
    MemoryPaymentGateway,
    MemoryPresenceTracker,
)

__all__ = [
    "CollaboratorHttpClient",
    "CollaboratorHttpConfig",
    "HttpIdentityDirectory",
    "HttpNotificationSender",
    "HttpPaymentGateway",
    "HttpPresenceTracker",
    "LoggingNotificationSender",
    "MemoryIdentityDirectory",
    "MemoryPaymentGateway",
    "MemoryPresenceTracker",
]
