"""Helpers de infraestrutura do BookingService.

Limites de tempo por chamada, lock de calendário, retry de escrita
otimista e tradução de falhas de infraestrutura para DependencyFailure.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, TypeVar

from app.domain.errors import DependencyFailure, NotFound, RoleMismatch, ValidationError
from app.observability import get_correlation_id, record_retry
from fsm.states import BookingStatus, parse_status
from utils.errors import InfrastructureError, StaleBookingError

if TYPE_CHECKING:
    import datetime as dt
    from collections.abc import AsyncIterator, Awaitable, Callable

    from app.domain.parties import PartyRole, UserProfile
    from app.protocols.booking_store import BookingStoreProtocol
    from app.protocols.identity_directory import IdentityDirectoryProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")

STORE = "booking_store"
IDENTITY = "identity"


def resolve_timeout(timeout: float | None, default: float) -> float:
    """Timeout explícito prevalece, inclusive 0."""
    return timeout if timeout is not None else default


async def call_dependency(
    dependency: str,
    operation: str,
    awaitable: Awaitable[T],
    timeout: float,
) -> T:
    """Aguarda `awaitable` com limite de tempo.

    Timeout e falhas de infraestrutura viram DependencyFailure (causa
    encadeada). StaleBookingError sobe intacto para o laço de retry.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    except StaleBookingError:
        raise
    except TimeoutError as exc:
        logger.warning(
            "dependency_timeout",
            extra={
                "component": dependency,
                "action": operation,
                "result": "timeout",
                "timeout_seconds": timeout,
                "correlation_id": get_correlation_id(),
            },
        )
        raise DependencyFailure(dependency, operation, "timeout") from exc
    except InfrastructureError as exc:
        logger.warning(
            "dependency_error",
            extra={
                "component": dependency,
                "action": operation,
                "result": "error",
                "error_type": type(exc).__name__,
                "correlation_id": get_correlation_id(),
            },
        )
        raise DependencyFailure(dependency, operation, type(exc).__name__) from exc


@asynccontextmanager
async def exclusive_calendar(
    store: BookingStoreProtocol,
    provider_id: str,
    date: dt.date,
    *,
    operation: str,
    timeout: float,
) -> AsyncIterator[None]:
    """Seção crítica sobre o calendário (provider, data).

    O bloco inteiro (espera pelo lock incluída) é limitado por `timeout`,
    que deve caber no lease do lock distribuído.
    """
    try:
        async with asyncio.timeout(timeout), store.calendar_lock(provider_id, date):
            yield
    except StaleBookingError:
        raise
    except TimeoutError as exc:
        raise DependencyFailure(STORE, operation, "lock_timeout") from exc
    except InfrastructureError as exc:
        raise DependencyFailure(STORE, operation, type(exc).__name__) from exc


async def with_write_retries(
    operation: str,
    attempt_fn: Callable[[], Awaitable[T]],
    max_attempts: int,
) -> T:
    """Reexecuta a operação inteira quando a escrita otimista perde a corrida."""
    for attempt in range(1, max_attempts + 1):
        try:
            return await attempt_fn()
        except StaleBookingError as exc:
            record_retry(STORE, operation, attempt, "stale_version", get_correlation_id())
            if attempt >= max_attempts:
                raise DependencyFailure(STORE, operation, "version_conflict") from exc
    raise DependencyFailure(STORE, operation, "version_conflict")


async def resolve_party(
    identity: IdentityDirectoryProtocol,
    user_id: str,
    role: PartyRole,
    timeout: float,
) -> UserProfile:
    """Resolve a parte e confere o papel (NotFound / RoleMismatch)."""
    profile = await call_dependency(
        IDENTITY, "resolve_user", identity.resolve_user(user_id), timeout
    )
    if profile is None:
        raise NotFound(role.value, user_id)
    if profile.role != role:
        raise RoleMismatch(user_id, role.value, profile.role.value)
    return profile


def parse_target_status(value: str | BookingStatus) -> BookingStatus:
    """Converte o status pedido; valores desconhecidos são ValidationError."""
    if isinstance(value, BookingStatus):
        return value
    status = parse_status(value) if isinstance(value, str) else None
    if status is None:
        raise ValidationError({"status": f"status desconhecido: {value!r}"})
    return status


__all__ = [
    "IDENTITY",
    "STORE",
    "call_dependency",
    "exclusive_calendar",
    "parse_target_status",
    "resolve_party",
    "resolve_timeout",
    "with_write_retries",
]
