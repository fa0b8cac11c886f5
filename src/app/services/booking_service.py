"""Ciclo de vida de reservas: criação, mudança de status, reagendamento.

Fluxo de cada operação de escrita:
    validar entrada → carregar/resolver partes → máquina de estados →
    (lock do calendário + detector de conflito) → escrita versionada →
    BookingOutcome(reserva, intenções ordenadas)

O serviço nunca executa side effects: devolve as intenções após o commit
para o chamador entregar ao SideEffectDispatcher.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from app.domain.booking import Booking, PartySnapshot, RescheduleSnapshot
from app.domain.errors import (
    BookingError,
    Forbidden,
    InvalidTransition,
    NotFound,
    SlotConflict,
    ValidationError,
)
from app.domain.interval import Interval
from app.domain.parties import PartyRole
from app.domain.requests import (
    CreateBookingRequest,
    RescheduleRequest,
    StatusChangeOptions,
    parse_request,
)
from app.domain.side_effects import (
    BookingOutcome,
    booking_approved_notice,
    booking_pending_notice,
)
from app.observability import (
    get_correlation_id,
    record_conflict,
    record_latency,
    record_transition,
)
from app.services._booking_helpers import (
    STORE,
    call_dependency,
    exclusive_calendar,
    parse_target_status,
    resolve_party,
    resolve_timeout,
    with_write_retries,
)
from app.services.booking_horizon import ensure_within_horizon, today_utc
from app.services.booking_queries import AvailabilityView, BookingPage, BookingQueries
from app.services.cancellation_policy import CancellationPolicy
from app.services.conflict_detector import find_conflicts
from fsm import BookingStatus, create_booking_fsm

if TYPE_CHECKING:
    import datetime as dt
    from collections.abc import Callable, Mapping
    from contextlib import AbstractAsyncContextManager

    from app.domain.side_effects import SideEffect
    from app.protocols.booking_store import BookingStoreProtocol
    from app.protocols.identity_directory import IdentityDirectoryProtocol
    from app.protocols.payment_gateway import Payment, PaymentGatewayProtocol
    from config.settings.booking import BookingSettings

logger = logging.getLogger(__name__)

_COMPONENT = "booking_service"
PAYMENT = "payment"


class BookingService:
    """Operações de escrita e leitura sobre reservas.

    Args:
        store: Persistência de reservas (único estado compartilhado)
        identity: Colaborador de identidade
        payments: Colaborador de pagamentos
        settings: Regras, limites de tempo e política de cancelamento
        today: Relógio de calendário (UTC) injetável para testes
    """

    def __init__(
        self,
        *,
        store: BookingStoreProtocol,
        identity: IdentityDirectoryProtocol,
        payments: PaymentGatewayProtocol,
        settings: BookingSettings,
        today: Callable[[], dt.date] = today_utc,
    ) -> None:
        self._store = store
        self._identity = identity
        self._payments = payments
        self._settings = settings
        self._policy = CancellationPolicy.from_settings(settings)
        self._today = today
        self._queries = BookingQueries(
            store=store, identity=identity, settings=settings, today=today
        )

    @property
    def settings(self) -> BookingSettings:
        return self._settings

    # ──────────────────────────────────────────────────────────────
    # Criação
    # ──────────────────────────────────────────────────────────────

    async def create_booking(
        self,
        request: Mapping[str, Any] | CreateBookingRequest,
        *,
        timeout: float | None = None,
    ) -> BookingOutcome:
        """Cria reserva `pending` e devolve aviso ao provider.

        Raises:
            ValidationError, HorizonViolation, NotFound, RoleMismatch,
            SlotConflict, DependencyFailure
        """
        async with self._measure("create"):
            limit = resolve_timeout(timeout, self._settings.operation_timeout_seconds)
            req = parse_request(CreateBookingRequest, request, self._validation_context())
            candidate = self._candidate_interval(
                req.start_time, req.effective_duration_hours, "time"
            )
            ensure_within_horizon(
                req.date, horizon_days=self._settings.horizon_days, today=self._today()
            )

            provider, requester = await asyncio.gather(
                resolve_party(self._identity, req.provider_id, PartyRole.PROVIDER, limit),
                resolve_party(self._identity, req.requester_id, PartyRole.REQUESTER, limit),
            )
            rate = (
                provider.hourly_rate
                if provider.hourly_rate is not None
                else self._settings.default_hourly_rate
            )
            booking = Booking(
                provider=PartySnapshot.from_profile(provider),
                requester=PartySnapshot.from_profile(requester),
                subject=req.subject,
                notes=req.notes,
                date=req.date,
                time=candidate.start_label,
                duration_hours=req.effective_duration_hours,
                slots=tuple(req.slots or ()),
                status=BookingStatus.PENDING,
                amount=round(rate * req.effective_duration_hours, 2),
            )

            async with self._calendar(booking.provider_id, booking.date, "create"):
                await self._ensure_no_conflict(booking, candidate, "create", limit)
                stored = await call_dependency(
                    STORE, "insert", self._store.insert(booking), limit
                )

            logger.info(
                "booking_created",
                extra={
                    "component": _COMPONENT,
                    "action": "create",
                    "result": "ok",
                    "booking_id": stored.booking_id,
                    "provider_id": stored.provider_id,
                    "duration_hours": stored.duration_hours,
                },
            )
            return BookingOutcome(booking=stored, side_effects=(booking_pending_notice(stored),))

    # ──────────────────────────────────────────────────────────────
    # Mudança de status
    # ──────────────────────────────────────────────────────────────

    async def change_booking_status(
        self,
        booking_id: str,
        actor_id: str,
        target_status: str | BookingStatus,
        options: Mapping[str, Any] | StatusChangeOptions | None = None,
        *,
        timeout: float | None = None,
    ) -> BookingOutcome:
        """Aplica transição pedida por uma das partes.

        Raises:
            ValidationError, NotFound, Forbidden, InvalidTransition,
            SlotConflict, DependencyFailure
        """
        async with self._measure("change_status"):
            limit = resolve_timeout(timeout, self._settings.operation_timeout_seconds)
            target = parse_target_status(target_status)
            opts = parse_request(StatusChangeOptions, options)
            self._check_options_for_target(target, opts)

            async def attempt() -> BookingOutcome:
                return await self._change_status_once(booking_id, actor_id, target, opts, limit)

            return await with_write_retries(
                "change_status", attempt, self._settings.max_write_attempts
            )

    async def _change_status_once(
        self,
        booking_id: str,
        actor_id: str,
        target: BookingStatus,
        opts: StatusChangeOptions,
        limit: float,
    ) -> BookingOutcome:
        booking = await self._load(booking_id, limit)
        role = self._authorize(booking, actor_id)

        machine = create_booking_fsm(booking.booking_id, booking.status)
        result = machine.transition(
            target,
            trigger="change_status",
            actor_role=role.value,
            metadata={"booking_id": booking.booking_id},
        )
        if not result.success:
            raise InvalidTransition(booking.status.value, target.value)

        updates: dict[str, Any] = {"status": target}
        payment: Payment | None = None
        if target == BookingStatus.CANCELLED:
            updates["cancelled_by"] = role.value
            updates["cancel_reason"] = opts.cancel_reason or ""
            if self._policy.needs_payment_lookup(role):
                payment = await call_dependency(
                    PAYMENT,
                    "find_completed_payment",
                    self._payments.find_completed_payment(booking.booking_id),
                    limit,
                )
        elif target == BookingStatus.CONFIRMED and opts.meeting_link:
            updates["meeting_link"] = opts.meeting_link

        updated = booking.model_copy(update=updates)
        if target == BookingStatus.CONFIRMED and booking.status == BookingStatus.RESCHEDULED:
            # Volta a ocupar o calendário: revalida sobreposição no novo horário
            async with self._calendar(booking.provider_id, booking.date, "confirm"):
                await self._ensure_no_conflict(updated, updated.interval, "confirm", limit)
                stored = await self._update(updated, booking.version, limit)
        else:
            stored = await self._update(updated, booking.version, limit)

        record_transition(
            booking.status.value, target.value, "change_status", role.value, get_correlation_id()
        )
        logger.info(
            "booking_status_changed",
            extra={
                "component": _COMPONENT,
                "action": "change_status",
                "result": "ok",
                "booking_id": stored.booking_id,
                "from_status": booking.status.value,
                "to_status": target.value,
                "actor_role": role.value,
            },
        )
        return BookingOutcome(
            booking=stored,
            side_effects=tuple(self._status_effects(stored, target, role, payment)),
        )

    def _status_effects(
        self,
        booking: Booking,
        target: BookingStatus,
        role: PartyRole,
        payment: Payment | None,
    ) -> list[SideEffect]:
        if target == BookingStatus.CANCELLED:
            return self._policy.effects_for(booking, role, payment)
        if target == BookingStatus.CONFIRMED:
            return [booking_approved_notice(booking)]
        return []

    @staticmethod
    def _check_options_for_target(target: BookingStatus, opts: StatusChangeOptions) -> None:
        fields: dict[str, str] = {}
        if opts.meeting_link and target != BookingStatus.CONFIRMED:
            fields["meeting_link"] = "permitido apenas ao confirmar"
        if opts.cancel_reason and target != BookingStatus.CANCELLED:
            fields["cancel_reason"] = "permitido apenas ao cancelar"
        if fields:
            raise ValidationError(fields)

    # ──────────────────────────────────────────────────────────────
    # Reagendamento
    # ──────────────────────────────────────────────────────────────

    async def reschedule_booking(
        self,
        booking_id: str,
        actor_id: str,
        new_date: dt.date | str,
        new_time: str,
        *,
        timeout: float | None = None,
    ) -> BookingOutcome:
        """Move a reserva para (new_date, new_time) com status `rescheduled`.

        Só a partir de pending/confirmed. Sem side effects.

        Raises:
            ValidationError, HorizonViolation, NotFound, Forbidden,
            InvalidTransition, SlotConflict, DependencyFailure
        """
        async with self._measure("reschedule"):
            limit = resolve_timeout(timeout, self._settings.operation_timeout_seconds)
            req = parse_request(RescheduleRequest, {"new_date": new_date, "new_time": new_time})
            ensure_within_horizon(
                req.new_date, horizon_days=self._settings.horizon_days, today=self._today()
            )

            async def attempt() -> BookingOutcome:
                return await self._reschedule_once(booking_id, actor_id, req, limit)

            return await with_write_retries(
                "reschedule", attempt, self._settings.max_write_attempts
            )

    async def _reschedule_once(
        self,
        booking_id: str,
        actor_id: str,
        req: RescheduleRequest,
        limit: float,
    ) -> BookingOutcome:
        booking = await self._load(booking_id, limit)
        role = self._authorize(booking, actor_id)

        machine = create_booking_fsm(booking.booking_id, booking.status)
        result = machine.reschedule(actor_role=role.value)
        if not result.success:
            raise InvalidTransition(booking.status.value, BookingStatus.RESCHEDULED.value)

        candidate = self._candidate_interval(req.new_time, booking.duration_hours, "new_time")
        moved = booking.model_copy(
            update={
                "rescheduled_from": RescheduleSnapshot(date=booking.date, time=booking.time),
                "date": req.new_date,
                "time": candidate.start_label,
                "slots": (),
                "status": BookingStatus.RESCHEDULED,
            }
        )
        async with self._calendar(booking.provider_id, req.new_date, "reschedule"):
            await self._ensure_no_conflict(moved, candidate, "reschedule", limit)
            stored = await self._update(moved, booking.version, limit)

        record_transition(
            booking.status.value,
            BookingStatus.RESCHEDULED.value,
            "reschedule",
            role.value,
            get_correlation_id(),
        )
        logger.info(
            "booking_rescheduled",
            extra={
                "component": _COMPONENT,
                "action": "reschedule",
                "result": "ok",
                "booking_id": stored.booking_id,
                "from_status": booking.status.value,
                "actor_role": role.value,
            },
        )
        return BookingOutcome(booking=stored, side_effects=())

    # ──────────────────────────────────────────────────────────────
    # Leitura
    # ──────────────────────────────────────────────────────────────

    async def get_booking_details(
        self,
        booking_id: str,
        actor_id: str,
        *,
        timeout: float | None = None,
    ) -> Booking:
        """Reserva visível apenas para suas partes (NotFound/Forbidden)."""
        async with self._measure("get_details"):
            booking = await self._load(
                booking_id, resolve_timeout(timeout, self._settings.operation_timeout_seconds)
            )
            self._authorize(booking, actor_id)
            return booking

    async def get_availability(
        self,
        provider_id: str,
        date: dt.date | str,
        *,
        timeout: float | None = None,
    ) -> AvailabilityView:
        """Slots livres do provider na data."""
        async with self._measure("get_availability"):
            return await self._queries.get_availability(provider_id, date, timeout=timeout)

    async def list_bookings(
        self,
        actor_id: str,
        role: PartyRole | str,
        *,
        status: str | None = None,
        search: str | None = None,
        date_filter: str | None = None,
        page: int = 1,
        limit: int | None = None,
        timeout: float | None = None,
    ) -> BookingPage:
        """Reservas do ator (provider ou requester), paginadas."""
        async with self._measure("list"):
            return await self._queries.list_bookings(
                actor_id,
                role,
                status=status,
                search=search,
                date_filter=date_filter,
                page=page,
                limit=limit,
                timeout=timeout,
            )

    # ──────────────────────────────────────────────────────────────
    # Internos
    # ──────────────────────────────────────────────────────────────

    def _validation_context(self) -> dict[str, float]:
        return {
            "min_duration_hours": self._settings.min_duration_hours,
            "max_duration_hours": self._settings.max_duration_hours,
        }

    @staticmethod
    def _candidate_interval(time_label: str, duration_hours: float, field: str) -> Interval:
        try:
            return Interval.from_clock(time_label, duration_hours)
        except ValueError as exc:
            raise ValidationError({field: "intervalo deve terminar no mesmo dia"}) from exc

    async def _load(self, booking_id: str, limit: float) -> Booking:
        booking = await call_dependency(STORE, "get", self._store.get(booking_id), limit)
        if booking is None:
            raise NotFound("booking", booking_id)
        return booking

    @staticmethod
    def _authorize(booking: Booking, actor_id: str) -> PartyRole:
        role = booking.role_of(actor_id)
        if role is None:
            raise Forbidden(booking.booking_id, actor_id)
        return role

    async def _update(self, booking: Booking, expected_version: int, limit: float) -> Booking:
        return await call_dependency(
            STORE, "update", self._store.update(booking, expected_version), limit
        )

    async def _ensure_no_conflict(
        self,
        booking: Booking,
        candidate: Interval,
        operation: str,
        limit: float,
    ) -> None:
        occupying = await call_dependency(
            STORE,
            "find_occupying",
            self._store.find_occupying(booking.provider_id, booking.date, booking.booking_id),
            limit,
        )
        conflicts = find_conflicts(candidate, occupying, exclude_booking_id=booking.booking_id)
        if not conflicts:
            return
        record_conflict(operation, len(conflicts), get_correlation_id())
        raise SlotConflict(
            booking.provider_id,
            booking.date.isoformat(),
            candidate.to_label(),
            [c.booking_id for c in conflicts],
        )

    def _calendar(
        self, provider_id: str, date: dt.date, operation: str
    ) -> AbstractAsyncContextManager[None]:
        return exclusive_calendar(
            self._store,
            provider_id,
            date,
            operation=operation,
            timeout=self._settings.lock_timeout_seconds,
        )

    def _measure(self, operation: str) -> _Measure:
        return _Measure(operation)


class _Measure:
    """Registra latência e resultado (ok ou kind do erro) da operação."""

    __slots__ = ("_operation", "_started")

    def __init__(self, operation: str) -> None:
        self._operation = operation
        self._started = 0.0

    async def __aenter__(self) -> None:
        self._started = time.perf_counter()

    async def __aexit__(self, exc_type: Any, exc: BaseException | None, tb: Any) -> None:
        if exc is None:
            result = "ok"
        elif isinstance(exc, BookingError):
            result = exc.kind
        else:
            result = "error"
        record_latency(
            _COMPONENT,
            self._operation,
            (time.perf_counter() - self._started) * 1000,
            get_correlation_id(),
            result=result,
        )


__all__ = ["BookingService"]
