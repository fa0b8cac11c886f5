"""Política de side effects ao cancelar uma reserva.

Cancelamento pelo provider: estorno integral quando há pagamento
concluído, aviso de estorno e aviso de recusa ao requester.
Cancelamento pelo requester: governado por flags explícitas
(por padrão nenhum efeito).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.domain.parties import PartyRole
from app.domain.side_effects import (
    DEFAULT_PROVIDER_REJECT_REASON,
    booking_cancelled_notice,
    booking_rejected_notice,
    refund_processed_notice,
    refund_requested,
)

if TYPE_CHECKING:
    from app.domain.booking import Booking
    from app.domain.side_effects import SideEffect
    from app.protocols.payment_gateway import Payment
    from config.settings.booking import BookingSettings

DEFAULT_REQUESTER_CANCEL_REASON = "cancelled by requester"


@dataclass(frozen=True, slots=True)
class CancellationPolicy:
    """Efeitos opcionais do cancelamento feito pelo requester."""

    refund_on_requester_cancel: bool = False
    notify_provider_on_requester_cancel: bool = False

    @classmethod
    def from_settings(cls, settings: BookingSettings) -> CancellationPolicy:
        return cls(
            refund_on_requester_cancel=settings.refund_on_requester_cancel,
            notify_provider_on_requester_cancel=settings.notify_provider_on_requester_cancel,
        )

    def needs_payment_lookup(self, actor_role: PartyRole) -> bool:
        """True se o cancelamento por `actor_role` pode gerar estorno."""
        return actor_role == PartyRole.PROVIDER or self.refund_on_requester_cancel

    def effects_for(
        self,
        booking: Booking,
        actor_role: PartyRole,
        payment: Payment | None,
    ) -> list[SideEffect]:
        """Intenções, em ordem, para uma reserva já cancelada e persistida."""
        effects: list[SideEffect] = []
        if actor_role == PartyRole.PROVIDER:
            if payment is not None:
                refund = refund_requested(
                    booking,
                    payment.payment_id,
                    booking.cancel_reason or DEFAULT_PROVIDER_REJECT_REASON,
                )
                effects.extend([refund, refund_processed_notice(booking, refund)])
            effects.append(booking_rejected_notice(booking))
            return effects

        if self.refund_on_requester_cancel and payment is not None:
            refund = refund_requested(
                booking,
                payment.payment_id,
                booking.cancel_reason or DEFAULT_REQUESTER_CANCEL_REASON,
            )
            effects.extend([refund, refund_processed_notice(booking, refund)])
        if self.notify_provider_on_requester_cancel:
            effects.append(booking_cancelled_notice(booking))
        return effects


__all__ = ["DEFAULT_REQUESTER_CANCEL_REASON", "CancellationPolicy"]
