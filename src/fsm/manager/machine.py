"""
Máquina de estados (BookingStateMachine) do ciclo de vida de reservas.

A máquina é efêmera: o service carrega a reserva, cria a máquina com o
status atual, pede a transição e, se bem-sucedida, persiste o novo
status. A máquina nunca executa IO nem side effects.
"""

from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.booking import (
    DEFAULT_INITIAL_STATUS,
    BookingStatus,
    is_terminal,
)
from fsm.transitions.rules import (
    RESCHEDULE_TRANSITIONS,
    TransitionMap,
    get_valid_targets,
    is_transition_valid,
)
from fsm.types.transition import StatusTransition, TransitionResult


class BookingStateMachine:
    """
    Máquina de estados de uma reserva.

    Valida transições contra o grafo e os guards, e mantém o histórico
    das transições feitas durante a operação corrente.

    Attributes:
        current_status: Status atual da reserva
        history: Transições realizadas nesta instância
    """

    __slots__ = ("_booking_id", "_current_status", "_history")

    def __init__(
        self,
        initial_status: BookingStatus | None = None,
        booking_id: str = "",
    ) -> None:
        self._current_status = initial_status or DEFAULT_INITIAL_STATUS
        self._history: list[StatusTransition] = []
        self._booking_id = booking_id

    @property
    def current_status(self) -> BookingStatus:
        """Status atual da reserva."""
        return self._current_status

    @property
    def history(self) -> list[StatusTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def booking_id(self) -> str:
        return self._booking_id

    @property
    def is_terminal(self) -> bool:
        """Verifica se está em status terminal."""
        return is_terminal(self._current_status)

    def can_transition_to(
        self,
        target: BookingStatus,
        transitions: TransitionMap | None = None,
    ) -> bool:
        """Verifica se pode transitar para o status alvo."""
        if not is_transition_valid(self._current_status, target, transitions):
            return False
        return evaluate_guards(self._current_status, target).allowed

    def get_valid_targets(
        self,
        transitions: TransitionMap | None = None,
    ) -> frozenset[BookingStatus]:
        """Retorna status de destino válidos a partir do status atual."""
        return get_valid_targets(self._current_status, transitions)

    def transition(
        self,
        target: BookingStatus,
        trigger: str,
        actor_role: str = "system",
        metadata: dict[str, Any] | None = None,
        transitions: TransitionMap | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de status.

        Args:
            target: Status de destino
            trigger: Operação que pediu a transição (ex: 'change_status')
            actor_role: Parte que pediu a transição
            metadata: Dados adicionais para auditoria (nunca PII)
            transitions: Grafo a aplicar (usa VALID_TRANSITIONS se None)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_status, target, transitions):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current_status.value} → {target.value}"
                ),
            )

        guard_result: GuardResult = evaluate_guards(self._current_status, target)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        transition = StatusTransition(
            from_status=self._current_status,
            to_status=target,
            trigger=trigger,
            actor_role=actor_role,
            metadata=metadata or {},
        )

        self._current_status = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def reschedule(
        self,
        actor_role: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """Transição da operação de reagendamento (PENDING/CONFIRMED → RESCHEDULED)."""
        return self.transition(
            BookingStatus.RESCHEDULED,
            trigger="reschedule",
            actor_role=actor_role,
            metadata=metadata,
            transitions=RESCHEDULE_TRANSITIONS,
        )

    def get_status_summary(self) -> dict[str, Any]:
        """
        Retorna resumo do status atual para observability.

        Returns:
            Dict com informações do status (seguro para logs)
        """
        return {
            "booking_id": self._booking_id,
            "current_status": self._current_status.value,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.value for s in self.get_valid_targets()),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        """Retorna histórico em formato seguro para logs."""
        return [t.to_log_dict() for t in self._history]


def create_booking_fsm(
    booking_id: str,
    initial_status: BookingStatus | None = None,
) -> BookingStateMachine:
    """
    Factory function para criar a máquina de uma reserva.

    Args:
        booking_id: Identificador da reserva
        initial_status: Status atual (usa DEFAULT_INITIAL_STATUS se None)

    Returns:
        BookingStateMachine configurada
    """
    return BookingStateMachine(
        initial_status=initial_status,
        booking_id=booking_id,
    )


# Re-exportado para conveniência
INITIAL_STATUSES = frozenset({DEFAULT_INITIAL_STATUS})
