"""Partes da reserva e disponibilidade do provider.

Formato consumido do colaborador de identidade. O core apenas lê estes
dados: disponibilidade e tarifa são do perfil do provider.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.domain.interval import is_clock, parse_clock, parse_slot_label

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class PartyRole(StrEnum):
    """Papel de uma parte na reserva."""

    PROVIDER = "provider"
    REQUESTER = "requester"


class AvailabilityWindow(BaseModel):
    """Janela semanal de atendimento.

    Ou lista explícita de rótulos de slot (usados como estão), ou faixa
    [start_time, end_time) fatiada em slots de uma hora.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    day_of_week: str = Field(..., description="Dia da semana em inglês (ex: monday).")
    start_time: str | None = Field(default=None, description="Início HH:MM.")
    end_time: str | None = Field(default=None, description="Fim HH:MM (exclusivo).")
    slots: tuple[str, ...] = Field(default=(), description="Rótulos explícitos de slot.")

    @field_validator("day_of_week")
    @classmethod
    def _normalize_day(cls, value: str) -> str:
        day = value.strip().lower()
        if day not in WEEKDAY_NAMES:
            raise ValueError(f"dia da semana inválido: {value}")
        return day

    @field_validator("slots")
    @classmethod
    def _validate_slots(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        for label in value:
            parse_slot_label(label)
        return value

    @model_validator(mode="after")
    def _require_range_or_slots(self) -> AvailabilityWindow:
        if self.slots:
            return self
        if not (self.start_time and self.end_time):
            raise ValueError("janela sem slots exige start_time e end_time")
        if not (is_clock(self.start_time) and is_clock(self.end_time)):
            raise ValueError("start_time/end_time devem ser HH:MM")
        if parse_clock(self.end_time) <= parse_clock(self.start_time):
            raise ValueError("end_time deve ser maior que start_time")
        return self


class UserProfile(BaseModel):
    """Perfil resolvido pelo colaborador de identidade."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    user_id: str
    role: PartyRole
    display_name: str
    email: str
    phone: str | None = None
    hourly_rate: float | None = Field(default=None, ge=0)
    availability: tuple[AvailabilityWindow, ...] = ()

    def windows_for(self, day_of_week: str) -> list[AvailabilityWindow]:
        return [w for w in self.availability if w.day_of_week == day_of_week]


__all__ = ["WEEKDAY_NAMES", "AvailabilityWindow", "PartyRole", "UserProfile"]
