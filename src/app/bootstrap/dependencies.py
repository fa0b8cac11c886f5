"""Factories de stores e colaboradores — criação de implementações concretas.

Este módulo centraliza a criação das dependências do BookingService e do
SideEffectDispatcher com base nas configurações de ambiente.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.bootstrap.clients import create_async_redis_client, create_http_client
from app.infra.collaborators import (
    CollaboratorHttpClient,
    CollaboratorHttpConfig,
    HttpIdentityDirectory,
    HttpNotificationSender,
    HttpPaymentGateway,
    HttpPresenceTracker,
    LoggingNotificationSender,
    MemoryIdentityDirectory,
    MemoryPaymentGateway,
    MemoryPresenceTracker,
)
from app.infra.stores import (
    MemoryBookingStore,
    MemorySideEffectLedger,
    RedisBookingStore,
    RedisSideEffectLedger,
)
from app.services.booking_service import BookingService
from app.services.side_effect_dispatcher import SideEffectDispatcher
from config.settings import (
    get_base_settings,
    get_booking_settings,
    get_collaborator_settings,
    get_store_settings,
)

if TYPE_CHECKING:
    from app.protocols.booking_store import BookingStoreProtocol
    from app.protocols.identity_directory import IdentityDirectoryProtocol
    from app.protocols.notification_sender import NotificationSenderProtocol
    from app.protocols.payment_gateway import PaymentGatewayProtocol
    from app.protocols.presence_tracker import PresenceTrackerProtocol
    from app.protocols.side_effect_ledger import SideEffectLedgerProtocol

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Store Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_booking_store() -> BookingStoreProtocol:
    """Cria store de reservas baseado em STORE_BACKEND.

    - "memory": MemoryBookingStore (dev only)
    - "redis": RedisBookingStore (staging/production)
    """
    settings = get_store_settings()
    if settings.backend == "redis":
        store: BookingStoreProtocol = RedisBookingStore(
            create_async_redis_client(),
            key_prefix=settings.key_prefix,
            lock_timeout_seconds=get_booking_settings().lock_timeout_seconds,
        )
    else:
        _warn_memory_outside_dev("booking_store")
        store = MemoryBookingStore()
    logger.info("booking_store_created", extra={"backend": settings.backend})
    return store


def create_side_effect_ledger() -> SideEffectLedgerProtocol:
    """Cria ledger de idempotência no mesmo backend do store de reservas."""
    settings = get_store_settings()
    if settings.backend == "redis":
        ledger: SideEffectLedgerProtocol = RedisSideEffectLedger(
            create_async_redis_client(),
            key_prefix=f"{settings.key_prefix}:side_effect:",
        )
    else:
        _warn_memory_outside_dev("side_effect_ledger")
        ledger = MemorySideEffectLedger()
    logger.info("side_effect_ledger_created", extra={"backend": settings.backend})
    return ledger


# ──────────────────────────────────────────────────────────────────────────────
# Collaborator Factories
# ──────────────────────────────────────────────────────────────────────────────


def _http(service: str, base_url: str) -> CollaboratorHttpClient:
    settings = get_collaborator_settings()
    config = CollaboratorHttpConfig(
        base_url=base_url,
        service=service,
        timeout_seconds=settings.http_timeout_seconds,
        api_token=settings.api_token,
    )
    return CollaboratorHttpClient(config, create_http_client())


def create_identity_directory() -> IdentityDirectoryProtocol:
    settings = get_collaborator_settings()
    if settings.identity_base_url:
        return HttpIdentityDirectory(_http("identity", settings.identity_base_url))
    _warn_memory_outside_dev("identity")
    return MemoryIdentityDirectory()


def create_payment_gateway() -> PaymentGatewayProtocol:
    settings = get_collaborator_settings()
    if settings.payment_base_url:
        return HttpPaymentGateway(_http("payment", settings.payment_base_url))
    _warn_memory_outside_dev("payment")
    return MemoryPaymentGateway()


def create_notification_sender() -> NotificationSenderProtocol:
    settings = get_collaborator_settings()
    if settings.notification_base_url:
        return HttpNotificationSender(_http("notification", settings.notification_base_url))
    _warn_memory_outside_dev("notification")
    return LoggingNotificationSender()


def create_presence_tracker() -> PresenceTrackerProtocol:
    """Presença é opcional: sem URL, todos ficam offline (entrega adiada)."""
    settings = get_collaborator_settings()
    if settings.presence_base_url:
        return HttpPresenceTracker(_http("presence", settings.presence_base_url))
    return MemoryPresenceTracker()


# ──────────────────────────────────────────────────────────────────────────────
# Service Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_booking_service(
    store: BookingStoreProtocol,
    payments: PaymentGatewayProtocol,
) -> BookingService:
    service = BookingService(
        store=store,
        identity=create_identity_directory(),
        payments=payments,
        settings=get_booking_settings(),
    )
    logger.info("booking_service_created")
    return service


def create_side_effect_dispatcher(payments: PaymentGatewayProtocol) -> SideEffectDispatcher:
    dispatcher = SideEffectDispatcher.from_settings(
        get_booking_settings(),
        ledger=create_side_effect_ledger(),
        payments=payments,
        notifications=create_notification_sender(),
        presence=create_presence_tracker(),
    )
    logger.info("side_effect_dispatcher_created")
    return dispatcher


def _warn_memory_outside_dev(component: str) -> None:
    environment = get_base_settings().environment
    if environment != "development":
        logger.warning(
            "memory_backend_in_non_dev",
            extra={"component": component, "backend": "memory", "environment": environment},
        )
