"""Filters de logging para injeção de contexto e remoção de PII.

Campos injetados:
- correlation_id: ID de rastreamento da requisição
- service: Nome do serviço (ex: booking-core)

Campos removidos: dados de contato das partes (email, telefone, nome)
que cheguem por engano via `extra`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

# Atributos de LogRecord que nunca devem ir para o log
PII_FIELDS = frozenset({"email", "phone", "name", "requester_name", "provider_name"})

REDACTED = "[redacted]"


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona correlation_id e service ao record.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class PiiRedactionFilter(logging.Filter):
    """Mascara atributos de contato das partes passados via `extra`.

    `name` é atributo reservado do LogRecord (nome do logger) e fica de
    fora; só chaves customizadas são mascaradas.
    """

    def __init__(self, fields: Iterable[str] = PII_FIELDS) -> None:
        super().__init__()
        self._fields = frozenset(fields) - {"name"}

    def filter(self, record: logging.LogRecord) -> bool:
        for field in self._fields:
            if getattr(record, field, None):
                setattr(record, field, REDACTED)
        return True
