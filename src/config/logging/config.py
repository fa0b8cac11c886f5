"""Configuração centralizada de logging.

Funções para configurar logging estruturado JSON com:
- Campos obrigatórios (correlation_id, service, level, logger, message)
- Níveis configuráveis por ambiente
- Loggers ruidosos de bibliotecas (httpx, uvicorn.access) rebaixados

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização do serviço (app/bootstrap/)
    configure_logging(level="INFO", service_name="booking-core")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("booking_created", extra={"booking_id": "abc", "latency_ms": 42})

Logs estruturados, sem PII (nunca email/telefone/nome das partes).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter, PiiRedactionFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

# Níveis de log válidos
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "booking-core"

# Bibliotecas que logam cada request em INFO
NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
    quiet_loggers: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Configura logging JSON estruturado para o serviço.

    Deve ser chamada uma vez na inicialização do serviço (app/bootstrap/).

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função opcional que retorna o correlation_id
            do contexto atual (ex: de ContextVar).
        quiet_loggers: Loggers de bibliotecas fixados em WARNING.

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(PiiRedactionFilter())

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]

    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado.

    O filter injeta automaticamente service e correlation_id.
    """
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log observável de fallback usado (sem PII).

    Registra quando um caminho degradado foi acionado
    (ex: presença indisponível → entrega adiada).

    Args:
        logger: Logger instance.
        component: Nome do componente (ex: "side_effect_dispatcher").
        reason: Razão do fallback (ex: "presence_timeout") — sem PII.
        elapsed_ms: Tempo decorrido em ms (quando aplicável).
    """
    extra: dict[str, object] = {
        "fallback_used": True,
        "component": component,
    }
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = elapsed_ms

    logger.info(
        "Fallback applied for %s",
        component,
        extra=extra,
    )
