"""Testes dos colaboradores em memória usados em desenvolvimento."""

from __future__ import annotations

import pytest

from app.domain.side_effects import booking_pending_notice
from app.infra.collaborators import (
    LoggingNotificationSender,
    MemoryIdentityDirectory,
    MemoryPaymentGateway,
    MemoryPresenceTracker,
)
from tests.fakes.booking_builders import make_booking, make_provider


class TestMemoryCollaborators:
    @pytest.mark.asyncio
    async def test_identity_directory(self) -> None:
        directory = MemoryIdentityDirectory()
        directory.register(make_provider("p-9"))

        assert (await directory.resolve_user("p-9")) is not None
        assert await directory.resolve_user("nobody") is None

    @pytest.mark.asyncio
    async def test_payment_gateway_refunds_recorded_payment(self) -> None:
        gateway = MemoryPaymentGateway()
        payment = gateway.record_payment("bk-1", 800.0)

        found = await gateway.find_completed_payment("bk-1")
        result = await gateway.refund(payment.payment_id, 800.0, "motivo")

        assert found == payment
        assert result.succeeded
        assert gateway.refunds == [(payment.payment_id, 800.0, "motivo")]

    @pytest.mark.asyncio
    async def test_presence_connect_disconnect(self) -> None:
        tracker = MemoryPresenceTracker()
        tracker.connect("u1")

        assert await tracker.is_online("u1") is True
        tracker.disconnect("u1")
        assert await tracker.is_online("u1") is False

    @pytest.mark.asyncio
    async def test_logging_sender(self, caplog: pytest.LogCaptureFixture) -> None:
        notice = booking_pending_notice(make_booking("bk-log").model_copy(update={"version": 1}))

        with caplog.at_level("INFO", logger="app.infra.collaborators.memory_collaborators"):
            await LoggingNotificationSender().deliver(notice, realtime=False)

        record = next(r for r in caplog.records if r.getMessage() == "notice_delivered_locally")
        assert record.intent_id == notice.intent_id
        assert record.realtime is False
