"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e agregadas depois
pelo backend de logs.

Métricas suportadas:
- Latência: tempo de execução por componente/operação
- Transição: contador de mudanças de status por origem/destino/gatilho
- Conflito: contador de pedidos recusados por sobreposição
- Side effect: resultado de execução de cada intenção
- Retry: novas tentativas (escrita otimista, dispatch)

Uso:
    from app.observability.metrics import record_latency, record_transition

    start = time.perf_counter()
    # ... operação ...
    record_latency("booking_service", "create", (time.perf_counter() - start) * 1000)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
    result: str = "ok",
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "booking_service")
        operation: Nome da operação (ex: "create", "reschedule")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
        result: Resultado (ok ou kind do erro)
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "result": result,
            "correlation_id": correlation_id,
        },
    )


def record_transition(
    from_status: str,
    to_status: str,
    trigger: str,
    actor_role: str,
    correlation_id: str | None = None,
) -> None:
    """Registra transição de status comprometida no store."""
    logger.info(
        "metric_transition",
        extra={
            "metric_type": "transition",
            "component": "booking_fsm",
            "from_status": from_status,
            "to_status": to_status,
            "trigger": trigger,
            "actor_role": actor_role,
            "correlation_id": correlation_id,
        },
    )


def record_conflict(
    operation: str,
    conflicting_count: int,
    correlation_id: str | None = None,
) -> None:
    """Registra pedido recusado por sobreposição de horário."""
    logger.info(
        "metric_conflict",
        extra={
            "metric_type": "conflict",
            "component": "conflict_detector",
            "operation": operation,
            "conflicting_count": conflicting_count,
            "correlation_id": correlation_id,
        },
    )


def record_side_effect(
    kind: str,
    result: str,
    attempts: int,
    correlation_id: str | None = None,
) -> None:
    """Registra resultado da execução de uma intenção.

    Args:
        kind: Tipo da intenção (refund_requested ou tipo do aviso)
        result: executed|duplicate|failed|skipped
        attempts: Tentativas feitas
        correlation_id: ID de correlação para rastreamento
    """
    logger.info(
        "metric_side_effect",
        extra={
            "metric_type": "side_effect",
            "component": "side_effect_dispatcher",
            "kind": kind,
            "result": result,
            "attempts": attempts,
            "correlation_id": correlation_id,
        },
    )


def record_retry(
    component: str,
    operation: str,
    attempt: int,
    reason: str,
    correlation_id: str | None = None,
) -> None:
    """Registra nova tentativa de uma operação."""
    logger.info(
        "metric_retry",
        extra={
            "metric_type": "retry",
            "component": component,
            "operation": operation,
            "attempt": attempt,
            "reason": reason,
            "correlation_id": correlation_id,
        },
    )
