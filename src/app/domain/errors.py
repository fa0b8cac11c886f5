"""Erros de domínio do ciclo de vida de reservas.

Cada erro carrega um `kind` estável (usado pela camada HTTP e por logs),
uma mensagem legível e `details` estruturados. Falhas de infraestrutura
nunca sobem cruas: são encapsuladas em DependencyFailure.
"""

from __future__ import annotations

from typing import Any


class BookingError(Exception):
    """Base para erros recuperáveis pelo chamador."""

    kind: str = "booking_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": self.details}


class ValidationError(BookingError):
    """Entrada ausente ou malformada; lista todos os campos com problema."""

    kind = "validation"

    def __init__(self, fields: dict[str, str], message: str | None = None) -> None:
        self.fields = dict(fields)
        super().__init__(
            message or f"Campos inválidos: {', '.join(sorted(self.fields))}",
            {"fields": self.fields},
        )


class NotFound(BookingError):
    """Reserva ou parte inexistente."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity} não encontrado: {entity_id}",
            {"entity": entity, "id": entity_id},
        )


class RoleMismatch(BookingError):
    """Parte resolvida com papel diferente do esperado."""

    kind = "role_mismatch"

    def __init__(self, user_id: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Papel incorreto para {user_id}: esperado {expected}, recebido {actual}",
            {"user_id": user_id, "expected": expected, "actual": actual},
        )


class Forbidden(BookingError):
    """Ator não é parte da reserva."""

    kind = "forbidden"

    def __init__(self, booking_id: str, actor_id: str) -> None:
        super().__init__(
            "Ator não autorizado para esta reserva",
            {"booking_id": booking_id, "actor_id": actor_id},
        )


class InvalidTransition(BookingError):
    """Mudança de status fora do grafo permitido."""

    kind = "invalid_transition"

    def __init__(self, source: str, target: str, reason: str | None = None) -> None:
        self.source = source
        self.target = target
        super().__init__(
            reason or f"Transição inválida: {source} → {target}",
            {"source": source, "target": target},
        )


class SlotConflict(BookingError):
    """Intervalo pedido sobrepõe reserva ocupante."""

    kind = "slot_conflict"

    def __init__(
        self,
        provider_id: str,
        date: str,
        interval_label: str,
        conflicting_ids: list[str] | None = None,
    ) -> None:
        super().__init__(
            f"Horário indisponível: {date} {interval_label}",
            {
                "provider_id": provider_id,
                "date": date,
                "interval": interval_label,
                "conflicting_booking_ids": list(conflicting_ids or []),
            },
        )


class HorizonViolation(BookingError):
    """Data no passado/hoje ou além da janela máxima de antecedência."""

    kind = "horizon_violation"

    def __init__(self, date: str, horizon_days: int) -> None:
        super().__init__(
            f"Data fora da janela permitida (amanhã até {horizon_days} dias): {date}",
            {"date": date, "horizon_days": horizon_days},
        )


class DependencyFailure(BookingError):
    """Colaborador (identidade, store, pagamento) indisponível ou com erro."""

    kind = "dependency_failure"

    def __init__(self, dependency: str, operation: str, reason: str = "") -> None:
        self.dependency = dependency
        self.operation = operation
        super().__init__(
            f"Falha em dependência {dependency} ({operation})",
            {"dependency": dependency, "operation": operation, "reason": reason},
        )


__all__ = [
    "BookingError",
    "DependencyFailure",
    "Forbidden",
    "HorizonViolation",
    "InvalidTransition",
    "NotFound",
    "RoleMismatch",
    "SlotConflict",
    "ValidationError",
]
