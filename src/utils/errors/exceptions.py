"""Exceções de domínio para falhas recuperáveis de infraestrutura."""

from __future__ import annotations


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class RedisConnectionError(InfrastructureError):
    """Falha de conexão/timeout ao acessar Redis."""


class CollaboratorHttpError(InfrastructureError):
    """Resposta inesperada ou falha de transporte em colaborador HTTP."""

    def __init__(self, service: str, status_code: int | None = None) -> None:
        self.service = service
        self.status_code = status_code
        suffix = f" (status={status_code})" if status_code is not None else ""
        super().__init__(f"Falha ao chamar {service}{suffix}")


class StaleBookingError(InfrastructureError):
    """Escrita otimista rejeitada: versão da reserva mudou no store."""

    def __init__(self, booking_id: str, expected_version: int) -> None:
        self.booking_id = booking_id
        self.expected_version = expected_version
        super().__init__(
            f"Versão desatualizada para {booking_id} (esperada {expected_version})"
        )
