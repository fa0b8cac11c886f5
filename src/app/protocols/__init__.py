"""Protocolos e contratos do core da aplicação."""

from .booking_store import BookingStoreProtocol, StaleBookingError
from .identity_directory import IdentityDirectoryProtocol
from .notification_sender import NotificationSenderProtocol
from .payment_gateway import Payment, PaymentGatewayProtocol, RefundResult
from .presence_tracker import PresenceTrackerProtocol
from .side_effect_ledger import SideEffectLedgerProtocol

__all__ = [
    "BookingStoreProtocol",
    "IdentityDirectoryProtocol",
    "NotificationSenderProtocol",
    "Payment",
    "PaymentGatewayProtocol",
    "PresenceTrackerProtocol",
    "RefundResult",
    "SideEffectLedgerProtocol",
    "StaleBookingError",
]
