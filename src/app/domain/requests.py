"""Modelos fechados de entrada por operação.

Campos desconhecidos são rejeitados (extra="forbid"). Erros de validação
do pydantic são convertidos para `ValidationError` de domínio listando
todos os campos com problema de uma vez.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from typing import Any, TypeVar
from urllib.parse import urlparse

import pydantic
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.domain.errors import ValidationError
from app.domain.interval import is_clock, parse_slot_label

MIN_DURATION_HOURS = 0.5
MAX_DURATION_HOURS = 8.0
MAX_NOTES_LENGTH = 500
MAX_CANCEL_REASON_LENGTH = 300
MAX_SUBJECT_LENGTH = 200
SLOT_MINUTES = 60

ModelT = TypeVar("ModelT", bound=BaseModel)


def _duration_bounds(info: ValidationInfo) -> tuple[float, float]:
    context = info.context or {}
    return (
        float(context.get("min_duration_hours", MIN_DURATION_HOURS)),
        float(context.get("max_duration_hours", MAX_DURATION_HOURS)),
    )


class CreateBookingRequest(BaseModel):
    """Pedido de criação. `slots` tem precedência sobre time/duration."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    provider_id: str = Field(..., min_length=1)
    requester_id: str = Field(..., min_length=1)
    subject: str = Field(..., min_length=1, max_length=MAX_SUBJECT_LENGTH)
    date: dt.date
    time: str | None = None
    duration_hours: float | None = None
    slots: list[str] | None = None
    notes: str = Field(default="", max_length=MAX_NOTES_LENGTH)

    @field_validator("time")
    @classmethod
    def _validate_time(cls, value: str | None) -> str | None:
        if value is not None and not is_clock(value):
            raise ValueError("horário deve estar no formato HH:MM")
        return value

    @field_validator("duration_hours")
    @classmethod
    def _validate_duration(cls, value: float | None, info: ValidationInfo) -> float | None:
        if value is None:
            return value
        low, high = _duration_bounds(info)
        if not low <= value <= high:
            raise ValueError(f"duração deve estar entre {low} e {high} horas")
        return value

    @field_validator("slots")
    @classmethod
    def _validate_slots(cls, value: list[str] | None, info: ValidationInfo) -> list[str] | None:
        if not value:
            return None
        intervals = [parse_slot_label(label, default_minutes=SLOT_MINUTES) for label in value]
        for previous, current in zip(intervals, intervals[1:], strict=False):
            if current.start != previous.end:
                raise ValueError("slots devem ser contíguos e em ordem")
        if any(i.duration_minutes != SLOT_MINUTES for i in intervals):
            raise ValueError("cada slot deve ter uma hora")
        _, high = _duration_bounds(info)
        if len(intervals) > high:
            raise ValueError(f"no máximo {int(high)} slots")
        return [label.strip() for label in value]

    @property
    def start_time(self) -> str:
        """Início efetivo: primeiro slot ou `time`."""
        if self.slots:
            return parse_slot_label(self.slots[0]).start_label
        if self.time is None:
            raise ValueError("time ausente e sem slots")
        return self.time

    @property
    def effective_duration_hours(self) -> float:
        if self.slots:
            return float(len(self.slots))
        if self.duration_hours is None:
            raise ValueError("duration_hours ausente e sem slots")
        return self.duration_hours


class StatusChangeOptions(BaseModel):
    """Campos reconhecidos por uma mudança de status."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    cancel_reason: str | None = Field(default=None, max_length=MAX_CANCEL_REASON_LENGTH)
    meeting_link: str | None = None

    @field_validator("meeting_link")
    @classmethod
    def _validate_link(cls, value: str | None) -> str | None:
        if not value:
            return None
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("meeting_link deve ser URL http(s) válida")
        return value


class RescheduleRequest(BaseModel):
    """Novo par (data, horário) de uma reserva."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    new_date: dt.date
    new_time: str

    @field_validator("new_time")
    @classmethod
    def _validate_time(cls, value: str) -> str:
        if not is_clock(value):
            raise ValueError("horário deve estar no formato HH:MM")
        return value


def _schedule_presence_errors(data: Mapping[str, Any]) -> dict[str, str]:
    if data.get("slots"):
        return {}
    errors: dict[str, str] = {}
    if not data.get("time"):
        errors["time"] = "obrigatório quando slots não é informado"
    if data.get("duration_hours") in (None, ""):
        errors["duration_hours"] = "obrigatório quando slots não é informado"
    return errors


def _fields_from_pydantic(exc: pydantic.ValidationError) -> dict[str, str]:
    fields: dict[str, str] = {}
    for error in exc.errors(include_url=False):
        loc = error.get("loc") or ("request",)
        key = str(loc[0])
        fields.setdefault(key, str(error.get("msg", "inválido")))
    return fields


def parse_request(
    model: type[ModelT],
    data: Mapping[str, Any] | ModelT | None,
    context: Mapping[str, Any] | None = None,
) -> ModelT:
    """Valida `data` contra `model`, levantando ValidationError de domínio.

    Todos os campos com problema são reportados juntos.
    """
    if isinstance(data, model):
        return data
    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValidationError({"request": "corpo deve ser um objeto"})

    fields: dict[str, str] = {}
    if model is CreateBookingRequest:
        fields.update(_schedule_presence_errors(data))
    try:
        parsed = model.model_validate(dict(data), context=dict(context or {}))
    except pydantic.ValidationError as exc:
        fields = {**_fields_from_pydantic(exc), **fields}
        raise ValidationError(fields) from exc
    if fields:
        raise ValidationError(fields)
    return parsed


__all__ = [
    "MAX_CANCEL_REASON_LENGTH",
    "MAX_DURATION_HOURS",
    "MAX_NOTES_LENGTH",
    "MIN_DURATION_HOURS",
    "SLOT_MINUTES",
    "CreateBookingRequest",
    "RescheduleRequest",
    "StatusChangeOptions",
    "parse_request",
]
