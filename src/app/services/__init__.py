"""Serviços de aplicação.

Unidades de orquestração do ciclo de vida de reservas (sem IO direto).
Implementações concretas de IO ficam em app/infra/ e chegam via protocolos.
"""

from app.services.booking_queries import AvailabilityView, BookingPage, BookingQueries
from app.services.booking_service import BookingService
from app.services.cancellation_policy import CancellationPolicy
from app.services.side_effect_dispatcher import (
    DispatchReport,
    DispatchResult,
    DispatchStatus,
    SideEffectDispatcher,
)

__all__ = [
    "AvailabilityView",
    "BookingPage",
    "BookingQueries",
    "BookingService",
    "CancellationPolicy",
    "DispatchReport",
    "DispatchResult",
    "DispatchStatus",
    "SideEffectDispatcher",
]
