"""
Tipos e estruturas de dados para transições de status.

Cada mudança de status gera um registro imutável usado em logs de
auditoria e na montagem dos side effects da transição.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from fsm.states.booking import BookingStatus


@dataclass(frozen=True, slots=True)
class StatusTransition:
    """
    Representa uma transição de status de reserva.

    Attributes:
        from_status: Status de origem da transição
        to_status: Status de destino da transição
        trigger: Operação que causou a transição (ex: 'change_status')
        actor_role: Parte que pediu a transição ('provider' | 'requester' | 'system')
        metadata: Dados adicionais para auditoria (nunca conter PII)
        timestamp: Momento da transição (UTC)
    """

    from_status: BookingStatus
    to_status: BookingStatus
    trigger: str
    actor_role: str = "system"
    metadata: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(UTC)
    )

    def __post_init__(self) -> None:
        """Valida invariantes do objeto após inicialização."""
        if not self.trigger or not self.trigger.strip():
            raise ValueError("trigger não pode ser vazio")

    def to_log_dict(self) -> dict[str, Any]:
        """
        Retorna representação segura para logs (sem PII).

        Returns:
            Dict com dados seguros para logging estruturado
        """
        return {
            "from_status": self.from_status.value,
            "to_status": self.to_status.value,
            "trigger": self.trigger,
            "actor_role": self.actor_role,
            "timestamp": self.timestamp.isoformat(),
            # metadata é incluído pois deve ser livre de PII por contrato
            "metadata": self.metadata,
        }


@dataclass(frozen=True, slots=True)
class TransitionResult:
    """
    Resultado de uma tentativa de transição.

    Attributes:
        success: Se a transição foi bem-sucedida
        transition: Dados da transição (se success=True)
        error_reason: Motivo da falha (se success=False)
    """

    success: bool
    transition: StatusTransition | None = None
    error_reason: str | None = None

    def __post_init__(self) -> None:
        """Valida consistência do resultado."""
        if self.success and self.transition is None:
            raise ValueError("Transição bem-sucedida deve incluir transition")
        if not self.success and self.error_reason is None:
            raise ValueError("Transição falha deve incluir error_reason")
