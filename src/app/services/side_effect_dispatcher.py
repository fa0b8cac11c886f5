"""Execução idempotente (pelo menos uma vez) das intenções de side effect.

Cada intenção passa pelo ledger antes de executar:
    claim (marca "processing", TTL curto) → executa com retry →
    mark_done (TTL longo) | release (falha final)

Intenções já marcadas são puladas como duplicadas. Um aviso com
`depends_on` não é entregue se o efeito do qual depende falhou.
Falhas aqui nunca desfazem a transição já comprometida.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from app.domain.side_effects import Notice, RefundRequested
from app.observability import get_correlation_id, record_retry, record_side_effect
from config.logging import log_fallback
from utils.errors import InfrastructureError

if TYPE_CHECKING:
    from app.domain.side_effects import SideEffect
    from app.protocols.notification_sender import NotificationSenderProtocol
    from app.protocols.payment_gateway import PaymentGatewayProtocol
    from app.protocols.presence_tracker import PresenceTrackerProtocol
    from app.protocols.side_effect_ledger import SideEffectLedgerProtocol
    from config.settings.booking import BookingSettings

logger = logging.getLogger(__name__)

_COMPONENT = "side_effect_dispatcher"
_MIN_PROCESSING_TTL_SECONDS = 30


class DispatchStatus(StrEnum):
    EXECUTED = "executed"
    DUPLICATE = "duplicate"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Resultado de uma intenção."""

    intent_id: str
    kind: str
    status: DispatchStatus
    attempts: int = 0
    error_type: str | None = None


@dataclass(frozen=True, slots=True)
class DispatchReport:
    """Resultados na mesma ordem das intenções recebidas."""

    results: tuple[DispatchResult, ...] = ()

    @property
    def failed(self) -> tuple[DispatchResult, ...]:
        return tuple(r for r in self.results if r.status == DispatchStatus.FAILED)

    @property
    def all_delivered(self) -> bool:
        return all(
            r.status in (DispatchStatus.EXECUTED, DispatchStatus.DUPLICATE)
            for r in self.results
        )


class RefundNotAccepted(Exception):
    """Gateway respondeu, mas recusou o estorno (sem retry)."""

    def __init__(self, payment_id: str, status: str) -> None:
        self.payment_id = payment_id
        self.status = status
        super().__init__(f"Estorno recusado: payment={payment_id} status={status}")


def _metric_kind(effect: SideEffect) -> str:
    if isinstance(effect, Notice):
        return str(effect.notice_type)
    return effect.kind


class SideEffectDispatcher:
    """Entrega intenções aos colaboradores de pagamento e notificação.

    Args:
        ledger: Marcação de intenções (idempotência)
        payments: Colaborador de pagamentos (estornos)
        notifications: Colaborador de entrega de avisos
        presence: Consulta de presença (realtime vs adiado)
        max_attempts: Tentativas por intenção
        backoff_seconds: Base do backoff exponencial entre tentativas
        intent_ttl_seconds: Tempo da marca "done" no ledger
        timeout_seconds: Limite por chamada a colaborador
        sleep: Espera injetável (testes)
    """

    def __init__(
        self,
        *,
        ledger: SideEffectLedgerProtocol,
        payments: PaymentGatewayProtocol,
        notifications: NotificationSenderProtocol,
        presence: PresenceTrackerProtocol,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
        intent_ttl_seconds: int = 7 * 86400,
        timeout_seconds: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._ledger = ledger
        self._payments = payments
        self._notifications = notifications
        self._presence = presence
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = backoff_seconds
        self._intent_ttl = intent_ttl_seconds
        self._timeout = timeout_seconds
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: BookingSettings,
        *,
        ledger: SideEffectLedgerProtocol,
        payments: PaymentGatewayProtocol,
        notifications: NotificationSenderProtocol,
        presence: PresenceTrackerProtocol,
    ) -> SideEffectDispatcher:
        return cls(
            ledger=ledger,
            payments=payments,
            notifications=notifications,
            presence=presence,
            max_attempts=settings.dispatch_max_attempts,
            backoff_seconds=settings.dispatch_backoff_seconds,
            intent_ttl_seconds=settings.intent_ttl_seconds,
            timeout_seconds=settings.operation_timeout_seconds,
        )

    @property
    def processing_ttl_seconds(self) -> int:
        """Cobre o pior caso de tentativas + backoff de uma intenção."""
        backoff_total = sum(
            self._backoff_delay(attempt) for attempt in range(1, self._max_attempts)
        )
        worst_case = self._max_attempts * self._timeout * 2 + backoff_total
        return max(_MIN_PROCESSING_TTL_SECONDS, math.ceil(worst_case))

    async def dispatch(self, side_effects: Sequence[SideEffect]) -> DispatchReport:
        """Executa as intenções em ordem; nunca levanta por falha de entrega."""
        results: list[DispatchResult] = []
        unsuccessful: set[str] = set()

        for effect in side_effects:
            depends_on = effect.depends_on if isinstance(effect, Notice) else None
            if depends_on is not None and depends_on in unsuccessful:
                result = DispatchResult(
                    intent_id=effect.intent_id,
                    kind=_metric_kind(effect),
                    status=DispatchStatus.SKIPPED,
                    error_type="dependency_failed",
                )
                logger.warning(
                    "side_effect_skipped",
                    extra={
                        "component": _COMPONENT,
                        "action": "dispatch",
                        "result": "skipped",
                        "depends_on": depends_on,
                        **effect.to_log_dict(),
                    },
                )
                record_side_effect(result.kind, result.status.value, 0, get_correlation_id())
            else:
                result = await self._run(effect)

            if result.status in (DispatchStatus.FAILED, DispatchStatus.SKIPPED):
                unsuccessful.add(effect.intent_id)
            results.append(result)

        return DispatchReport(results=tuple(results))

    async def _run(self, effect: SideEffect) -> DispatchResult:
        kind = _metric_kind(effect)
        try:
            claimed = await asyncio.wait_for(
                self._ledger.claim(effect.intent_id, self.processing_ttl_seconds),
                timeout=self._timeout,
            )
        except (InfrastructureError, TimeoutError) as exc:
            logger.error(
                "side_effect_ledger_unavailable",
                extra={
                    "component": _COMPONENT,
                    "action": "claim",
                    "result": "failed",
                    "error_type": type(exc).__name__,
                    **effect.to_log_dict(),
                },
            )
            record_side_effect(kind, DispatchStatus.FAILED.value, 0, get_correlation_id())
            return DispatchResult(
                effect.intent_id, kind, DispatchStatus.FAILED, 0, type(exc).__name__
            )

        if not claimed:
            logger.info(
                "side_effect_duplicate",
                extra={
                    "component": _COMPONENT,
                    "action": "dispatch",
                    "result": "duplicate",
                    **effect.to_log_dict(),
                },
            )
            record_side_effect(kind, DispatchStatus.DUPLICATE.value, 0, get_correlation_id())
            return DispatchResult(effect.intent_id, kind, DispatchStatus.DUPLICATE)

        attempts = 0
        error_type: str | None = None
        while attempts < self._max_attempts:
            attempts += 1
            try:
                await self._execute(effect)
            except RefundNotAccepted as exc:
                error_type = type(exc).__name__
                logger.error(
                    "side_effect_rejected",
                    extra={
                        "component": _COMPONENT,
                        "action": "execute",
                        "result": "rejected",
                        "refund_status": exc.status,
                        **effect.to_log_dict(),
                    },
                )
                break
            except (InfrastructureError, TimeoutError) as exc:
                error_type = type(exc).__name__
                logger.warning(
                    "side_effect_attempt_failed",
                    extra={
                        "component": _COMPONENT,
                        "action": "execute",
                        "result": "error",
                        "attempt": attempts,
                        "error_type": error_type,
                        **effect.to_log_dict(),
                    },
                )
                if attempts < self._max_attempts:
                    record_retry(
                        _COMPONENT, kind, attempts + 1, error_type, get_correlation_id()
                    )
                    await self._sleep(self._backoff_delay(attempts))
            except Exception as exc:
                # Erro fora do contrato do colaborador: sem retry, lote segue
                error_type = type(exc).__name__
                logger.exception(
                    "side_effect_unexpected_error",
                    extra={
                        "component": _COMPONENT,
                        "action": "execute",
                        "result": "error",
                        "attempt": attempts,
                        "error_type": error_type,
                        **effect.to_log_dict(),
                    },
                )
                break
            else:
                await self._finish(effect, kind, attempts)
                return DispatchResult(effect.intent_id, kind, DispatchStatus.EXECUTED, attempts)

        await self._give_up(effect, kind, attempts, error_type)
        return DispatchResult(effect.intent_id, kind, DispatchStatus.FAILED, attempts, error_type)

    async def _execute(self, effect: SideEffect) -> None:
        if isinstance(effect, RefundRequested):
            result = await asyncio.wait_for(
                self._payments.refund(effect.payment_id, effect.amount, effect.reason),
                timeout=self._timeout,
            )
            if not result.succeeded:
                raise RefundNotAccepted(effect.payment_id, result.status)
            return
        realtime = await self._is_online(effect.recipient_id)
        await asyncio.wait_for(
            self._notifications.deliver(effect, realtime=realtime),
            timeout=self._timeout,
        )

    async def _is_online(self, user_id: str) -> bool:
        """Presença indisponível vira entrega adiada."""
        try:
            return bool(
                await asyncio.wait_for(self._presence.is_online(user_id), timeout=self._timeout)
            )
        except TimeoutError:
            log_fallback(logger, _COMPONENT, reason="presence_timeout")
        except InfrastructureError:
            log_fallback(logger, _COMPONENT, reason="presence_unavailable")
        return False

    async def _finish(self, effect: SideEffect, kind: str, attempts: int) -> None:
        try:
            await asyncio.wait_for(
                self._ledger.mark_done(effect.intent_id, self._intent_ttl),
                timeout=self._timeout,
            )
        except (InfrastructureError, TimeoutError) as exc:
            # A marca "processing" expira e a intenção pode ser reexecutada.
            logger.warning(
                "side_effect_mark_done_failed",
                extra={
                    "component": _COMPONENT,
                    "action": "mark_done",
                    "result": "error",
                    "error_type": type(exc).__name__,
                    **effect.to_log_dict(),
                },
            )
        logger.info(
            "side_effect_executed",
            extra={
                "component": _COMPONENT,
                "action": "execute",
                "result": "ok",
                "attempts": attempts,
                **effect.to_log_dict(),
            },
        )
        record_side_effect(kind, DispatchStatus.EXECUTED.value, attempts, get_correlation_id())

    async def _give_up(
        self, effect: SideEffect, kind: str, attempts: int, error_type: str | None
    ) -> None:
        try:
            await asyncio.wait_for(self._ledger.release(effect.intent_id), timeout=self._timeout)
        except (InfrastructureError, TimeoutError) as exc:
            logger.warning(
                "side_effect_release_failed",
                extra={
                    "component": _COMPONENT,
                    "action": "release",
                    "result": "error",
                    "error_type": type(exc).__name__,
                    **effect.to_log_dict(),
                },
            )
        logger.error(
            "side_effect_failed",
            extra={
                "component": _COMPONENT,
                "action": "execute",
                "result": "failed",
                "attempts": attempts,
                "error_type": error_type,
                **effect.to_log_dict(),
            },
        )
        record_side_effect(kind, DispatchStatus.FAILED.value, attempts, get_correlation_id())

    def _backoff_delay(self, attempt: int) -> float:
        return self._backoff_seconds * (2 ** (attempt - 1))


__all__ = [
    "DispatchReport",
    "DispatchResult",
    "DispatchStatus",
    "RefundNotAccepted",
    "SideEffectDispatcher",
]
