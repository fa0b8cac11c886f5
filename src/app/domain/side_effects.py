"""Intenções de side effect emitidas após o commit de uma transição.

O core nunca executa estes efeitos: devolve-os em ordem para o chamador
entregar ao dispatcher. Cada intenção tem `intent_id` determinístico
(`{booking_id}:{version}:{kind}:{recipient}`), usado para idempotência.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from app.domain.booking import Booking

DEFAULT_PROVIDER_REJECT_REASON = "rejected by provider"


class NoticeType(StrEnum):
    """Tipos de aviso entregues pelo colaborador de notificação."""

    BOOKING_PENDING = "booking_pending"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_CANCELLED = "booking_cancelled"
    REFUND_PROCESSED = "refund_processed"


def _intent_id(booking_id: str, version: int, kind: str, recipient_id: str) -> str:
    return f"{booking_id}:{version}:{kind}:{recipient_id}"


@dataclass(frozen=True, slots=True)
class RefundRequested:
    """Pedido de estorno integral de um pagamento concluído."""

    booking_id: str
    version: int
    payment_id: str
    amount: float
    reason: str
    recipient_id: str

    kind = "refund_requested"

    @property
    def intent_id(self) -> str:
        return _intent_id(self.booking_id, self.version, self.kind, self.recipient_id)

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "intent_id": self.intent_id,
            "kind": self.kind,
            "booking_id": self.booking_id,
            "amount": self.amount,
        }


@dataclass(frozen=True, slots=True)
class Notice:
    """Aviso a uma parte da reserva.

    `depends_on` aponta para o `intent_id` de um efeito que precisa ter
    sucesso antes (ex: aviso de estorno depende do estorno).
    """

    notice_type: NoticeType
    booking_id: str
    version: int
    recipient_id: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    depends_on: str | None = None

    kind = "notice"

    @property
    def intent_id(self) -> str:
        return _intent_id(
            self.booking_id, self.version, str(self.notice_type), self.recipient_id
        )

    def to_log_dict(self) -> dict[str, Any]:
        return {
            "intent_id": self.intent_id,
            "kind": self.kind,
            "notice_type": str(self.notice_type),
            "booking_id": self.booking_id,
        }


SideEffect = RefundRequested | Notice


@dataclass(frozen=True, slots=True)
class BookingOutcome:
    """Resultado de uma operação: reserva persistida + intenções ordenadas."""

    booking: Booking
    side_effects: tuple[SideEffect, ...] = ()


def _notice_payload(booking: Booking, **extra: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "booking_id": booking.booking_id,
        "display_code": booking.display_code,
        "subject": booking.subject,
        "date": booking.date.isoformat(),
        "time": booking.time,
        "duration_hours": booking.duration_hours,
        "status": str(booking.status),
    }
    payload.update({k: v for k, v in extra.items() if v is not None})
    return payload


def booking_pending_notice(booking: Booking) -> Notice:
    """Aviso ao provider de nova reserva aguardando aprovação."""
    return Notice(
        notice_type=NoticeType.BOOKING_PENDING,
        booking_id=booking.booking_id,
        version=booking.version,
        recipient_id=booking.provider_id,
        payload=_notice_payload(
            booking, requester_name=booking.requester.name, amount=booking.amount
        ),
    )


def booking_approved_notice(booking: Booking) -> Notice:
    return Notice(
        notice_type=NoticeType.BOOKING_APPROVED,
        booking_id=booking.booking_id,
        version=booking.version,
        recipient_id=booking.requester_id,
        payload=_notice_payload(
            booking,
            provider_name=booking.provider.name,
            meeting_link=booking.meeting_link,
        ),
    )


def booking_rejected_notice(booking: Booking) -> Notice:
    return Notice(
        notice_type=NoticeType.BOOKING_REJECTED,
        booking_id=booking.booking_id,
        version=booking.version,
        recipient_id=booking.requester_id,
        payload=_notice_payload(
            booking,
            provider_name=booking.provider.name,
            reason=booking.cancel_reason or None,
        ),
    )


def booking_cancelled_notice(booking: Booking) -> Notice:
    """Aviso ao provider de cancelamento feito pelo requester."""
    return Notice(
        notice_type=NoticeType.BOOKING_CANCELLED,
        booking_id=booking.booking_id,
        version=booking.version,
        recipient_id=booking.provider_id,
        payload=_notice_payload(
            booking,
            requester_name=booking.requester.name,
            reason=booking.cancel_reason or None,
        ),
    )


def refund_requested(booking: Booking, payment_id: str, reason: str) -> RefundRequested:
    return RefundRequested(
        booking_id=booking.booking_id,
        version=booking.version,
        payment_id=payment_id,
        amount=booking.amount,
        reason=reason,
        recipient_id=booking.requester_id,
    )


def refund_processed_notice(booking: Booking, refund: RefundRequested) -> Notice:
    return Notice(
        notice_type=NoticeType.REFUND_PROCESSED,
        booking_id=booking.booking_id,
        version=booking.version,
        recipient_id=refund.recipient_id,
        payload=_notice_payload(booking, amount=refund.amount, reason=refund.reason),
        depends_on=refund.intent_id,
    )


__all__ = [
    "DEFAULT_PROVIDER_REJECT_REASON",
    "BookingOutcome",
    "Notice",
    "NoticeType",
    "RefundRequested",
    "SideEffect",
    "booking_approved_notice",
    "booking_cancelled_notice",
    "booking_pending_notice",
    "booking_rejected_notice",
    "refund_processed_notice",
    "refund_requested",
]
