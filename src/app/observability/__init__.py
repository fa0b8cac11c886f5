"""Observabilidade — logs estruturados, correlação, métricas.

Re-exporta funções de correlation_id e métricas para uso em toda a aplicação.

Uso:
    from app.observability import get_correlation_id, set_correlation_id
    from app.observability import record_latency, record_transition
"""

from app.observability.correlation import (
    CORRELATION_HEADER,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from app.observability.metrics import (
    record_conflict,
    record_latency,
    record_retry,
    record_side_effect,
    record_transition,
)

__all__ = [
    "CORRELATION_HEADER",
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "record_conflict",
    "record_latency",
    "record_retry",
    "record_side_effect",
    "record_transition",
    "reset_correlation_id",
    "set_correlation_id",
]
