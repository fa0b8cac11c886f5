"""Dependências FastAPI das rotas de reservas."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from app.bootstrap import get_booking_service, get_side_effect_dispatcher
from app.domain.errors import ValidationError
from app.services.booking_service import BookingService
from app.services.side_effect_dispatcher import SideEffectDispatcher

ACTOR_HEADER = "X-Actor-Id"


def require_actor_id(
    x_actor_id: Annotated[str | None, Header(alias=ACTOR_HEADER)] = None,
) -> str:
    """Id do ator autenticado (autenticação é externa a este serviço)."""
    actor_id = (x_actor_id or "").strip()
    if not actor_id:
        raise ValidationError({ACTOR_HEADER: "header obrigatório"})
    return actor_id


def booking_service() -> BookingService:
    return get_booking_service()


def side_effect_dispatcher() -> SideEffectDispatcher:
    return get_side_effect_dispatcher()


ActorId = Annotated[str, Depends(require_actor_id)]
Service = Annotated[BookingService, Depends(booking_service)]
Dispatcher = Annotated[SideEffectDispatcher, Depends(side_effect_dispatcher)]
