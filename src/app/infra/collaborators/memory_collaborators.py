"""Colaboradores em memória — apenas para desenvolvimento local.

ATENÇÃO: Não usar em staging/production. Ativados pelo bootstrap quando
IDENTITY_BASE_URL não está configurado em development.
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from app.protocols.identity_directory import IdentityDirectoryProtocol
from app.protocols.notification_sender import NotificationSenderProtocol
from app.protocols.payment_gateway import Payment, PaymentGatewayProtocol, RefundResult
from app.protocols.presence_tracker import PresenceTrackerProtocol

if TYPE_CHECKING:
    from app.domain.parties import UserProfile
    from app.domain.side_effects import Notice

logger = logging.getLogger(__name__)


class MemoryIdentityDirectory(IdentityDirectoryProtocol):
    """Diretório de perfis em dicionário."""

    def __init__(self, profiles: list[UserProfile] | None = None) -> None:
        self._profiles = {p.user_id: p for p in profiles or []}

    def register(self, profile: UserProfile) -> None:
        self._profiles[profile.user_id] = profile

    async def resolve_user(self, user_id: str) -> UserProfile | None:
        return self._profiles.get(user_id)


class MemoryPaymentGateway(PaymentGatewayProtocol):
    """Pagamentos concluídos registrados manualmente; estornos sempre aceitos."""

    def __init__(self) -> None:
        self._payments: dict[str, Payment] = {}
        self.refunds: list[tuple[str, float, str]] = []

    def record_payment(self, booking_id: str, amount: float) -> Payment:
        payment = Payment(payment_id=uuid.uuid4().hex, booking_id=booking_id, amount=amount)
        self._payments[booking_id] = payment
        return payment

    async def find_completed_payment(self, booking_id: str) -> Payment | None:
        return self._payments.get(booking_id)

    async def refund(self, payment_id: str, amount: float, reason: str) -> RefundResult:
        self.refunds.append((payment_id, amount, reason))
        return RefundResult(refund_id=uuid.uuid4().hex, status="processed", amount=amount)


class LoggingNotificationSender(NotificationSenderProtocol):
    """Registra avisos em log em vez de entregá-los."""

    async def deliver(self, notice: Notice, *, realtime: bool) -> None:
        logger.info(
            "notice_delivered_locally",
            extra={**notice.to_log_dict(), "realtime": realtime},
        )


class MemoryPresenceTracker(PresenceTrackerProtocol):
    """Conjunto de usuários online mantido pelo processo."""

    def __init__(self) -> None:
        self._online: set[str] = set()

    def connect(self, user_id: str) -> None:
        self._online.add(user_id)

    def disconnect(self, user_id: str) -> None:
        self._online.discard(user_id)

    async def is_online(self, user_id: str) -> bool:
        return user_id in self._online
