"""Entidade Booking e snapshots denormalizados.

O store é o dono do estado durável; o core manipula uma cópia transitória
durante uma operação e produz novas versões via `model_copy(update=...)`.
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.interval import Interval
from app.domain.parties import PartyRole, UserProfile
from fsm.states import BookingStatus, is_occupying

UNKNOWN_PHONE = "N/A"
DISPLAY_CODE_PREFIX = "BK"

CancelledBy = Literal["provider", "requester"]


def new_booking_id() -> str:
    """Gera id opaco e imutável para uma nova reserva."""
    return uuid.uuid4().hex


class PartySnapshot(BaseModel):
    """Dados de exibição da parte capturados na criação (nunca atualizados)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_id: str
    name: str
    email: str
    phone: str = UNKNOWN_PHONE

    @classmethod
    def from_profile(cls, profile: UserProfile) -> PartySnapshot:
        return cls(
            user_id=profile.user_id,
            name=profile.display_name,
            email=profile.email,
            phone=(profile.phone or "").strip() or UNKNOWN_PHONE,
        )


class RescheduleSnapshot(BaseModel):
    """Par (date, time) anterior ao último reagendamento."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    date: dt.date
    time: str


class Booking(BaseModel):
    """Reserva entre provider e requester em um dia do calendário."""

    model_config = ConfigDict(extra="forbid")

    booking_id: str = Field(default_factory=new_booking_id)
    provider: PartySnapshot
    requester: PartySnapshot
    subject: str
    notes: str = ""
    date: dt.date
    time: str = Field(..., description="Início HH:MM (24h).")
    duration_hours: float
    slots: tuple[str, ...] = Field(default=(), description="Rótulos originais, só exibição.")
    status: BookingStatus = BookingStatus.PENDING
    amount: float
    cancelled_by: CancelledBy | None = None
    cancel_reason: str | None = None
    rescheduled_from: RescheduleSnapshot | None = None
    meeting_link: str | None = None
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None
    version: int = 0

    @property
    def interval(self) -> Interval:
        return Interval.from_clock(self.time, self.duration_hours)

    @property
    def display_code(self) -> str:
        return f"{DISPLAY_CODE_PREFIX}{self.booking_id[-6:].upper()}"

    @property
    def is_occupying(self) -> bool:
        return is_occupying(self.status)

    @property
    def provider_id(self) -> str:
        return self.provider.user_id

    @property
    def requester_id(self) -> str:
        return self.requester.user_id

    def role_of(self, actor_id: str) -> PartyRole | None:
        """Papel do ator nesta reserva, ou None se não for parte."""
        if actor_id == self.provider.user_id:
            return PartyRole.PROVIDER
        if actor_id == self.requester.user_id:
            return PartyRole.REQUESTER
        return None

    def counterpart_of(self, role: PartyRole) -> PartySnapshot:
        return self.requester if role == PartyRole.PROVIDER else self.provider

    def to_public_dict(self) -> dict[str, object]:
        """Representação serializável com campos derivados."""
        data = self.model_dump(mode="json")
        data["display_code"] = self.display_code
        data["end_time"] = self.interval.end_label
        return data


__all__ = [
    "DISPLAY_CODE_PREFIX",
    "UNKNOWN_PHONE",
    "Booking",
    "CancelledBy",
    "PartySnapshot",
    "RescheduleSnapshot",
    "new_booking_id",
]
