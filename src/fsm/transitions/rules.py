"""
Regras de transição válidas entre status de reserva.

Dois grafos convivem aqui:
    - VALID_TRANSITIONS: mudanças de status pedidas por uma das partes
      (confirmar, concluir, cancelar)
    - RESCHEDULE_TRANSITIONS: a operação de reagendamento, que move a
      reserva para nova data/hora e só parte de PENDING ou CONFIRMED
"""

from fsm.states.booking import TERMINAL_STATUSES, BookingStatus

# Tipagem explícita do mapa de transições
TransitionMap = dict[BookingStatus, frozenset[BookingStatus]]

# Chave: status de origem
# Valor: conjunto de status de destino permitidos
VALID_TRANSITIONS: TransitionMap = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
        BookingStatus.RESCHEDULED,
    }),
    # RESCHEDULED exige nova confirmação explícita (ou cancelamento)
    BookingStatus.RESCHEDULED: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.CANCELLED,
    }),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

RESCHEDULE_TRANSITIONS: TransitionMap = {
    BookingStatus.PENDING: frozenset({BookingStatus.RESCHEDULED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.RESCHEDULED}),
    BookingStatus.RESCHEDULED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def get_valid_targets(
    status: BookingStatus,
    transitions: TransitionMap | None = None,
) -> frozenset[BookingStatus]:
    """
    Retorna os status de destino válidos para um status de origem.

    Args:
        status: Status de origem
        transitions: Grafo a consultar (usa VALID_TRANSITIONS se None)

    Returns:
        Conjunto de status de destino permitidos (vazio se terminal)
    """
    graph = transitions if transitions is not None else VALID_TRANSITIONS
    return graph.get(status, frozenset())


def is_transition_valid(
    from_status: BookingStatus,
    to_status: BookingStatus,
    transitions: TransitionMap | None = None,
) -> bool:
    """
    Verifica se uma transição é válida segundo o grafo informado.

    Args:
        from_status: Status de origem
        to_status: Status de destino
        transitions: Grafo a consultar (usa VALID_TRANSITIONS se None)

    Returns:
        True se a transição é permitida, False caso contrário
    """
    if from_status in TERMINAL_STATUSES:
        return False
    return to_status in get_valid_targets(from_status, transitions)


def validate_transition_map(transitions: TransitionMap | None = None) -> list[str]:
    """
    Valida a integridade de um mapa de transições.

    Verifica:
    - Todos os status do enum estão no mapa
    - Status terminais têm conjunto vazio
    - Nenhuma transição aponta para status inexistente

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    graph = transitions if transitions is not None else VALID_TRANSITIONS
    errors: list[str] = []

    for status in BookingStatus:
        if status not in graph:
            errors.append(f"Status {status.name} ausente no mapa de transições")

    for status in TERMINAL_STATUSES:
        targets = graph.get(status, frozenset())
        if targets:
            errors.append(
                f"Status terminal {status.name} não deveria ter transições: {sorted(targets)}"
            )

    for from_status, targets in graph.items():
        for target in targets:
            if not isinstance(target, BookingStatus):
                errors.append(f"Transição {from_status.name} → {target}: destino inválido")

    return errors
