"""Contrato do colaborador de pagamentos."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict


class Payment(BaseModel):
    """Pagamento concluído associado a uma reserva."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    payment_id: str
    booking_id: str
    amount: float
    status: str = "completed"


class RefundResult(BaseModel):
    """Resultado de um pedido de estorno."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    refund_id: str
    status: str
    amount: float

    @property
    def succeeded(self) -> bool:
        return self.status in {"processed", "pending", "success"}


@runtime_checkable
class PaymentGatewayProtocol(Protocol):
    """Consulta pagamentos e solicita estornos."""

    async def find_completed_payment(self, booking_id: str) -> Payment | None:
        """Retorna o pagamento concluído da reserva, se houver."""
        ...

    async def refund(self, payment_id: str, amount: float, reason: str) -> RefundResult:
        """Solicita estorno; erros de transporte sobem como exceção."""
        ...
