"""Adapters HTTP dos colaboradores de identidade, pagamento e notificação.

Contratos de rota (JSON):
    GET  {identity}/users/{user_id}                     -> UserProfile | 404
    GET  {payment}/payments/completed?booking_id=...    -> Payment | 404
    POST {payment}/payments/{payment_id}/refunds        -> RefundResult
    POST {notification}/notices                         -> 202/204
    GET  {presence}/presence/{user_id}                  -> {"online": bool}
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from app.domain.parties import UserProfile
from app.protocols.identity_directory import IdentityDirectoryProtocol
from app.protocols.notification_sender import NotificationSenderProtocol
from app.protocols.payment_gateway import Payment, PaymentGatewayProtocol, RefundResult
from app.protocols.presence_tracker import PresenceTrackerProtocol
from utils.errors import CollaboratorHttpError

if TYPE_CHECKING:
    from app.domain.side_effects import Notice
    from app.infra.collaborators.http_base import CollaboratorHttpClient

logger = logging.getLogger(__name__)


class HttpIdentityDirectory(IdentityDirectoryProtocol):
    """Resolve perfis no serviço de identidade."""

    def __init__(self, http: CollaboratorHttpClient) -> None:
        self._http = http

    async def resolve_user(self, user_id: str) -> UserProfile | None:
        data = await self._http.get_json(f"/users/{user_id}")
        if data is None:
            return None
        try:
            return UserProfile.model_validate({"user_id": user_id, **data})
        except PydanticValidationError as exc:
            logger.warning(
                "identity_profile_invalid",
                extra={
                    "component": self._http.service,
                    "user_id": user_id,
                    "error_count": exc.error_count(),
                },
            )
            raise CollaboratorHttpError(self._http.service) from exc


class HttpPaymentGateway(PaymentGatewayProtocol):
    """Consulta pagamentos e solicita estornos no serviço de pagamentos."""

    def __init__(self, http: CollaboratorHttpClient) -> None:
        self._http = http

    async def find_completed_payment(self, booking_id: str) -> Payment | None:
        data = await self._http.get_json(
            "/payments/completed", params={"booking_id": booking_id}
        )
        if data is None:
            return None
        try:
            return Payment.model_validate({"booking_id": booking_id, **data})
        except PydanticValidationError as exc:
            raise CollaboratorHttpError(self._http.service) from exc

    async def refund(self, payment_id: str, amount: float, reason: str) -> RefundResult:
        data = await self._http.post_json(
            f"/payments/{payment_id}/refunds",
            {"amount": amount, "reason": reason},
            idempotency_key=f"refund:{payment_id}",
        )
        try:
            return RefundResult.model_validate(data)
        except PydanticValidationError as exc:
            raise CollaboratorHttpError(self._http.service) from exc


class HttpNotificationSender(NotificationSenderProtocol):
    """Entrega avisos ao serviço de notificação (socket/push/email)."""

    def __init__(self, http: CollaboratorHttpClient) -> None:
        self._http = http

    async def deliver(self, notice: Notice, *, realtime: bool) -> None:
        await self._http.post_json(
            "/notices",
            {
                "type": str(notice.notice_type),
                "recipient_id": notice.recipient_id,
                "booking_id": notice.booking_id,
                "payload": dict(notice.payload),
                "realtime": realtime,
            },
            idempotency_key=notice.intent_id,
        )


class HttpPresenceTracker(PresenceTrackerProtocol):
    """Consulta presença no serviço de tempo real."""

    def __init__(self, http: CollaboratorHttpClient) -> None:
        self._http = http

    async def is_online(self, user_id: str) -> bool:
        data = await self._http.get_json(f"/presence/{user_id}")
        return bool(data and data.get("online"))
