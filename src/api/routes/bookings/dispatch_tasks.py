"""Controle de tasks assíncronas para entrega de side effects."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from app.domain.side_effects import SideEffect
    from app.services.side_effect_dispatcher import DispatchReport, SideEffectDispatcher

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 50

_semaphore: asyncio.Semaphore | None = None
_active_tasks: set[asyncio.Task[Any]] = set()


def configure_dispatch_concurrency(max_concurrency: int) -> None:
    """Define o limite de dispatches simultâneos (chamado no startup)."""
    global _semaphore
    _semaphore = asyncio.Semaphore(max(1, max_concurrency))


def _get_semaphore() -> asyncio.Semaphore:
    global _semaphore
    if _semaphore is None:
        _semaphore = asyncio.Semaphore(DEFAULT_MAX_CONCURRENCY)
    return _semaphore


def schedule_dispatch(
    dispatcher: SideEffectDispatcher,
    side_effects: Sequence[SideEffect],
    *,
    correlation_id: str,
) -> int:
    """Agenda entrega das intenções fora do ciclo da requisição.

    Returns:
        Quantidade de tasks ativas após o agendamento.
    """
    if not side_effects:
        return len(_active_tasks)
    task = asyncio.create_task(_run_with_limit(dispatcher, tuple(side_effects)))
    _active_tasks.add(task)
    task.add_done_callback(_on_dispatch_task_done)
    logger.info(
        "side_effect_dispatch_scheduled",
        extra={
            "component": "dispatch_tasks",
            "correlation_id": correlation_id,
            "intents": len(side_effects),
            "active_tasks": len(_active_tasks),
        },
    )
    return len(_active_tasks)


async def _run_with_limit(
    dispatcher: SideEffectDispatcher, side_effects: tuple[SideEffect, ...]
) -> DispatchReport:
    async with _get_semaphore():
        return await dispatcher.dispatch(side_effects)


def _on_dispatch_task_done(task: asyncio.Task[Any]) -> None:
    _active_tasks.discard(task)
    with contextlib.suppress(asyncio.CancelledError):
        exc = task.exception()
        if exc is not None:
            logger.error(
                "side_effect_dispatch_task_failed",
                extra={
                    "component": "dispatch_tasks",
                    "error_type": type(exc).__name__,
                    "active_tasks": len(_active_tasks),
                },
            )
            return
        report = task.result()
        if report.failed:
            logger.warning(
                "side_effect_dispatch_incomplete",
                extra={
                    "component": "dispatch_tasks",
                    "failed_intents": [r.intent_id for r in report.failed],
                },
            )


def active_dispatch_count() -> int:
    return len(_active_tasks)


async def drain_dispatch_tasks(timeout_seconds: float = 30.0) -> None:
    """Aguarda tasks pendentes durante shutdown do processo."""
    if not _active_tasks:
        return

    pending_now = list(_active_tasks)
    logger.info(
        "side_effect_dispatch_shutdown_wait",
        extra={
            "component": "dispatch_tasks",
            "pending_tasks": len(pending_now),
            "timeout_seconds": timeout_seconds,
        },
    )
    _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
    if not pending:
        return

    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    logger.warning(
        "side_effect_dispatch_shutdown_cancelled",
        extra={"component": "dispatch_tasks", "cancelled_tasks": len(pending)},
    )
