"""Bootstrap da aplicação — inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, get_booking_service

    # Na inicialização do serviço
    initialize_app()

    service = get_booking_service()
    dispatcher = get_side_effect_dispatcher()
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_booking_settings,
    get_collaborator_settings,
    get_store_settings,
)

if TYPE_CHECKING:
    from app.protocols.booking_store import BookingStoreProtocol
    from app.protocols.payment_gateway import PaymentGatewayProtocol
    from app.services.booking_service import BookingService
    from app.services.side_effect_dispatcher import SideEffectDispatcher

STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do serviço.

    Configura:
    - Logging estruturado JSON com correlation_id
    """
    base = get_base_settings()
    configure_logging(
        level=base.log_level,
        service_name=base.service_name,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging em DEBUG)."""
    base = get_base_settings()
    configure_logging(
        level="DEBUG",
        service_name=f"{base.service_name}_test",
        correlation_id_getter=get_correlation_id,
    )


def collect_settings_errors() -> list[str]:
    """Reúne erros de todas as settings, prefixados pelo grupo."""
    base = get_base_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"store: {error}" for error in get_store_settings().validate(base))
    errors.extend(f"booking: {error}" for error in get_booking_settings().validate_runtime())
    errors.extend(
        f"collaborators: {error}" for error in get_collaborator_settings().validate(base)
    )
    return errors


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` mantém alerta sem bloquear execução local.
    """
    environment = get_base_settings().environment
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors = collect_settings_errors()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


# ──────────────────────────────────────────────────────────────────────────────
# Getters (lazy initialization com cache)
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_booking_store() -> BookingStoreProtocol:
    """Obtém store de reservas (singleton)."""
    from app.bootstrap.dependencies import create_booking_store

    return create_booking_store()


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGatewayProtocol:
    """Obtém colaborador de pagamentos (singleton, compartilhado)."""
    from app.bootstrap.dependencies import create_payment_gateway

    return create_payment_gateway()


@lru_cache(maxsize=1)
def get_booking_service() -> BookingService:
    """Obtém BookingService (singleton)."""
    from app.bootstrap.dependencies import create_booking_service

    return create_booking_service(get_booking_store(), get_payment_gateway())


@lru_cache(maxsize=1)
def get_side_effect_dispatcher() -> SideEffectDispatcher:
    """Obtém SideEffectDispatcher (singleton)."""
    from app.bootstrap.dependencies import create_side_effect_dispatcher

    return create_side_effect_dispatcher(get_payment_gateway())


def reset_dependencies() -> None:
    """Descarta singletons (testes e recarga de settings)."""
    for getter in (
        get_booking_store,
        get_payment_gateway,
        get_booking_service,
        get_side_effect_dispatcher,
    ):
        getter.cache_clear()
