"""Construtores de perfis, settings e serviço para os testes de reservas."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

from app.domain.booking import Booking, PartySnapshot
from app.domain.parties import AvailabilityWindow, PartyRole, UserProfile
from app.infra.stores import MemoryBookingStore, MemorySideEffectLedger
from app.services.booking_service import BookingService
from app.services.side_effect_dispatcher import SideEffectDispatcher
from config.settings.booking import BookingSettings
from fsm import BookingStatus
from tests.fakes.fake_collaborators import (
    FakeIdentityDirectory,
    FakeNotificationSender,
    FakePaymentGateway,
    FakePresenceTracker,
)

# 2026-03-02 é uma segunda-feira
TODAY = dt.date(2026, 3, 2)
PROVIDER_ID = "prov-1"
REQUESTER_ID = "req-1"
OTHER_REQUESTER_ID = "req-2"


def make_provider(
    user_id: str = PROVIDER_ID,
    *,
    hourly_rate: float | None = None,
    availability: tuple[AvailabilityWindow, ...] | None = None,
) -> UserProfile:
    windows = availability
    if windows is None:
        windows = tuple(
            AvailabilityWindow(day_of_week=day, start_time="09:00", end_time="17:00")
            for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
        )
    return UserProfile(
        user_id=user_id,
        role=PartyRole.PROVIDER,
        display_name="Dra. Ana",
        email="ana@example.com",
        phone="+5511999990000",
        hourly_rate=hourly_rate,
        availability=windows,
    )


def make_requester(user_id: str = REQUESTER_ID, *, phone: str | None = None) -> UserProfile:
    return UserProfile(
        user_id=user_id,
        role=PartyRole.REQUESTER,
        display_name=f"Cliente {user_id}",
        email=f"{user_id}@example.com",
        phone=phone,
    )


def make_booking(
    booking_id: str,
    *,
    time: str = "10:00",
    duration_hours: float = 1.0,
    status: BookingStatus = BookingStatus.PENDING,
    date: dt.date = TODAY + dt.timedelta(days=7),
) -> Booking:
    return Booking(
        booking_id=booking_id,
        provider=PartySnapshot(user_id=PROVIDER_ID, name="Dra. Ana", email="ana@example.com"),
        requester=PartySnapshot(user_id=REQUESTER_ID, name="Cliente", email="c@example.com"),
        subject="Consulta",
        date=date,
        time=time,
        duration_hours=duration_hours,
        status=status,
        amount=800.0 * duration_hours,
    )


def create_payload(
    *,
    date: dt.date | None = None,
    time: str | None = "13:00",
    duration_hours: float | None = 1,
    requester_id: str = REQUESTER_ID,
    **extra: object,
) -> dict[str, object]:
    payload: dict[str, object] = {
        "provider_id": PROVIDER_ID,
        "requester_id": requester_id,
        "subject": "Consulta inicial",
        "date": (date or TODAY + dt.timedelta(days=7)).isoformat(),
    }
    if time is not None:
        payload["time"] = time
    if duration_hours is not None:
        payload["duration_hours"] = duration_hours
    payload.update(extra)
    return payload


@dataclass
class BookingHarness:
    """Serviço, dispatcher e fakes ligados ao mesmo store em memória."""

    settings: BookingSettings = field(default_factory=BookingSettings)
    store: MemoryBookingStore = field(default_factory=MemoryBookingStore)
    ledger: MemorySideEffectLedger = field(default_factory=MemorySideEffectLedger)
    identity: FakeIdentityDirectory = field(default_factory=FakeIdentityDirectory)
    payments: FakePaymentGateway = field(default_factory=FakePaymentGateway)
    notifications: FakeNotificationSender = field(default_factory=FakeNotificationSender)
    presence: FakePresenceTracker = field(default_factory=FakePresenceTracker)
    today: dt.date = TODAY

    def __post_init__(self) -> None:
        for profile in (
            make_provider(),
            make_requester(),
            make_requester(OTHER_REQUESTER_ID),
        ):
            self.identity.add(profile)

    @property
    def service(self) -> BookingService:
        return BookingService(
            store=self.store,
            identity=self.identity,
            payments=self.payments,
            settings=self.settings,
            today=lambda: self.today,
        )

    def dispatcher(self, **overrides: object) -> SideEffectDispatcher:
        async def _no_sleep(_: float) -> None:
            return None

        kwargs: dict[str, object] = {
            "ledger": self.ledger,
            "payments": self.payments,
            "notifications": self.notifications,
            "presence": self.presence,
            "backoff_seconds": 0.0,
            "sleep": _no_sleep,
        }
        kwargs.update(overrides)
        return SideEffectDispatcher(**kwargs)  # type: ignore[arg-type]
