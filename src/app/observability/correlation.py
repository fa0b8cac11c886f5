"""Gerenciamento de correlation_id para rastreamento de requisições.

O correlation_id chega no header `X-Correlation-Id` (ou é gerado) e é
injetado em todos os logs. Usa ContextVar para ser thread/async-safe:
tarefas de dispatch criadas com `asyncio.create_task` herdam o valor.

Uso:
    from app.observability import set_correlation_id, reset_correlation_id

    token = set_correlation_id(request.headers.get("x-correlation-id"))
    try:
        ...
    finally:
        reset_correlation_id(token)
"""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

CORRELATION_HEADER = "x-correlation-id"
_MAX_LENGTH = 128

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Valores vazios geram um novo UUID; valores externos são truncados.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = (correlation_id or "").strip()[:_MAX_LENGTH] or generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    """Gera um novo correlation_id (UUID v4)."""
    return str(uuid.uuid4())


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Define correlation_id durante o bloco e restaura ao sair."""
    token = set_correlation_id(correlation_id)
    try:
        yield _correlation_id.get()
    finally:
        reset_correlation_id(token)
