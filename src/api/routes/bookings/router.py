"""Endpoints de reservas.

Cada escrita devolve a reserva persistida; as intenções de side effect são
agendadas para entrega em background e nunca bloqueiam a resposta.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Any

from fastapi import APIRouter, Body, Query
from fastapi.responses import JSONResponse

from api.routes.bookings.dependencies import ActorId, Dispatcher, Service
from api.routes.bookings.dispatch_tasks import schedule_dispatch
from app.domain.errors import ValidationError
from app.domain.requests import RescheduleRequest, parse_request
from app.observability import get_correlation_id
from app.services.booking_queries import ALL_DATES, ALL_STATUSES

if TYPE_CHECKING:
    from app.domain.side_effects import BookingOutcome
    from app.services.side_effect_dispatcher import SideEffectDispatcher

router = APIRouter()
providers_router = APIRouter()

JsonBody = Annotated[dict[str, Any] | None, Body()]


def _outcome_response(
    outcome: BookingOutcome,
    dispatcher: SideEffectDispatcher,
    status_code: int = 200,
) -> JSONResponse:
    correlation_id = get_correlation_id()
    schedule_dispatch(dispatcher, outcome.side_effects, correlation_id=correlation_id)
    return JSONResponse(
        status_code=status_code,
        content={
            "booking": outcome.booking.to_public_dict(),
            "side_effects": [
                {"intent_id": effect.intent_id, "kind": effect.kind}
                for effect in outcome.side_effects
            ],
        },
    )


@router.post("")
async def create_booking(
    service: Service,
    dispatcher: Dispatcher,
    actor_id: ActorId,
    payload: JsonBody = None,
) -> JSONResponse:
    """Cria reserva `pending`; o requester é o ator autenticado."""
    data = dict(payload or {})
    requester_id = data.setdefault("requester_id", actor_id)
    if requester_id != actor_id:
        raise ValidationError({"requester_id": "deve ser o ator autenticado"})
    outcome = await service.create_booking(data)
    return _outcome_response(outcome, dispatcher, status_code=201)


@router.get("")
async def list_bookings(
    service: Service,
    actor_id: ActorId,
    role: Annotated[str, Query()] = "requester",
    status: Annotated[str, Query()] = ALL_STATUSES,
    search: Annotated[str | None, Query()] = None,
    date_filter: Annotated[str, Query()] = ALL_DATES,
    page: Annotated[int, Query()] = 1,
    limit: Annotated[int | None, Query()] = None,
) -> dict[str, Any]:
    """Reservas do ator no papel pedido, mais recentes primeiro."""
    result = await service.list_bookings(
        actor_id,
        role,
        status=status,
        search=search,
        date_filter=date_filter,
        page=page,
        limit=limit,
    )
    return result.to_dict()


@router.get("/{booking_id}")
async def get_booking(booking_id: str, service: Service, actor_id: ActorId) -> dict[str, Any]:
    booking = await service.get_booking_details(booking_id, actor_id)
    return {"booking": booking.to_public_dict()}


@router.patch("/{booking_id}/status")
async def change_booking_status(
    booking_id: str,
    service: Service,
    dispatcher: Dispatcher,
    actor_id: ActorId,
    payload: JsonBody = None,
) -> JSONResponse:
    """Corpo: `{"status": ..., "cancel_reason"?: ..., "meeting_link"?: ...}`."""
    options = dict(payload or {})
    target = options.pop("status", None)
    if not target:
        raise ValidationError({"status": "obrigatório"})
    outcome = await service.change_booking_status(booking_id, actor_id, target, options)
    return _outcome_response(outcome, dispatcher)


@router.post("/{booking_id}/reschedule")
async def reschedule_booking(
    booking_id: str,
    service: Service,
    dispatcher: Dispatcher,
    actor_id: ActorId,
    payload: JsonBody = None,
) -> JSONResponse:
    """Corpo: `{"new_date": "YYYY-MM-DD", "new_time": "HH:MM"}`."""
    req = parse_request(RescheduleRequest, payload)
    outcome = await service.reschedule_booking(booking_id, actor_id, req.new_date, req.new_time)
    return _outcome_response(outcome, dispatcher)


@providers_router.get("/{provider_id}/availability")
async def get_availability(
    provider_id: str,
    service: Service,
    date: Annotated[str | None, Query()] = None,
) -> dict[str, Any]:
    """Slots livres do provider na data (`?date=YYYY-MM-DD`)."""
    if not date:
        raise ValidationError({"date": "obrigatório"})
    view = await service.get_availability(provider_id, date)
    return view.to_dict()
