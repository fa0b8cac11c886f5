"""Settings do ciclo de vida de reservas.

Centralizar a leitura de env aqui evita espalhar parse de configuracao
pelos services e mantem a politica de cancelamento explicita.
"""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BookingSettings(BaseModel):
    """Configuracoes de regras, timeouts e dispatch de reservas."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    horizon_days: int = Field(
        default=90,
        ge=1,
        description="Antecedencia maxima (dias) para criar/reagendar.",
    )
    default_hourly_rate: float = Field(
        default=800.0,
        ge=0,
        description="Tarifa por hora quando o provider nao define a sua.",
    )
    min_duration_hours: float = Field(default=0.5, gt=0)
    max_duration_hours: float = Field(default=8.0, gt=0)
    slot_minutes: int = Field(
        default=60,
        ge=15,
        le=240,
        description="Largura dos slots gerados a partir de faixas de disponibilidade.",
    )
    operation_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Limite por chamada a colaborador (store, identidade, pagamento).",
    )
    max_write_attempts: int = Field(
        default=3,
        ge=1,
        description="Tentativas de escrita otimista antes de falhar.",
    )
    lock_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Lease do lock de calendario (provider, data).",
    )
    dispatch_max_attempts: int = Field(default=3, ge=1)
    dispatch_backoff_seconds: float = Field(default=0.5, ge=0)
    dispatch_max_concurrency: int = Field(default=50, ge=1)
    intent_ttl_seconds: int = Field(
        default=7 * 86400,
        ge=1,
        description="Tempo que uma intencao executada fica marcada no ledger.",
    )
    refund_on_requester_cancel: bool = Field(
        default=False,
        description="Estornar pagamento quando o requester cancela.",
    )
    notify_provider_on_requester_cancel: bool = Field(
        default=False,
        description="Avisar o provider quando o requester cancela.",
    )
    default_page_size: int = Field(default=10, ge=1, le=100)

    @model_validator(mode="after")
    def _check_duration_bounds(self) -> BookingSettings:
        if self.min_duration_hours > self.max_duration_hours:
            raise ValueError("min_duration_hours deve ser <= max_duration_hours")
        return self

    def validate_runtime(self) -> list[str]:
        """Coerencias que dependem da combinacao de campos.

        Returns:
            Lista de erros (vazia = OK).
        """
        errors: list[str] = []
        if self.lock_timeout_seconds < self.operation_timeout_seconds:
            errors.append(
                "BOOKING_LOCK_TIMEOUT_SECONDS deve ser >= BOOKING_OPERATION_TIMEOUT_SECONDS"
            )
        if self.max_duration_hours * 60 > 24 * 60:
            errors.append("BOOKING_MAX_DURATION_HOURS nao pode exceder um dia")
        return errors


def _parse_bool(value: str) -> bool:
    """Converte texto de env em bool com o mesmo padrao dos outros settings."""
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _load_booking_from_env() -> BookingSettings:
    """Carrega BookingSettings a partir de variaveis de ambiente."""
    return BookingSettings(
        horizon_days=int(os.getenv("BOOKING_HORIZON_DAYS", "90")),
        default_hourly_rate=float(os.getenv("BOOKING_DEFAULT_HOURLY_RATE", "800")),
        min_duration_hours=float(os.getenv("BOOKING_MIN_DURATION_HOURS", "0.5")),
        max_duration_hours=float(os.getenv("BOOKING_MAX_DURATION_HOURS", "8")),
        slot_minutes=int(os.getenv("BOOKING_SLOT_MINUTES", "60")),
        operation_timeout_seconds=float(os.getenv("BOOKING_OPERATION_TIMEOUT_SECONDS", "5")),
        max_write_attempts=int(os.getenv("BOOKING_MAX_WRITE_ATTEMPTS", "3")),
        lock_timeout_seconds=float(os.getenv("BOOKING_LOCK_TIMEOUT_SECONDS", "10")),
        dispatch_max_attempts=int(os.getenv("BOOKING_DISPATCH_MAX_ATTEMPTS", "3")),
        dispatch_backoff_seconds=float(os.getenv("BOOKING_DISPATCH_BACKOFF_SECONDS", "0.5")),
        dispatch_max_concurrency=int(os.getenv("BOOKING_DISPATCH_MAX_CONCURRENCY", "50")),
        intent_ttl_seconds=int(os.getenv("BOOKING_INTENT_TTL_SECONDS", str(7 * 86400))),
        refund_on_requester_cancel=_parse_bool(
            os.getenv("BOOKING_REFUND_ON_REQUESTER_CANCEL", "false")
        ),
        notify_provider_on_requester_cancel=_parse_bool(
            os.getenv("BOOKING_NOTIFY_PROVIDER_ON_REQUESTER_CANCEL", "false")
        ),
        default_page_size=int(os.getenv("BOOKING_DEFAULT_PAGE_SIZE", "10")),
    )


@lru_cache(maxsize=1)
def get_booking_settings() -> BookingSettings:
    """Retorna instancia cacheada de BookingSettings."""
    return _load_booking_from_env()


__all__ = ["BookingSettings", "get_booking_settings"]
