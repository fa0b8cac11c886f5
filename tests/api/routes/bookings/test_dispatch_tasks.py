"""Testes para controle de tasks de entrega de side effects."""

from __future__ import annotations

import asyncio

import pytest

from api.routes.bookings import dispatch_tasks
from app.domain.side_effects import booking_pending_notice
from app.services.side_effect_dispatcher import DispatchReport, DispatchResult, DispatchStatus
from tests.fakes.booking_builders import BookingHarness, make_booking


class _StubDispatcher:
    """Dispatcher controlável: espera `gate`, depois devolve `report` ou levanta `error`."""

    def __init__(
        self,
        *,
        report: DispatchReport | None = None,
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.report = report or DispatchReport()
        self.error = error
        self.gate = gate
        self.calls = 0

    async def dispatch(self, side_effects: object) -> DispatchReport:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.report


def _effects() -> list:
    booking = make_booking("bk-task").model_copy(update={"version": 1})
    return [booking_pending_notice(booking)]


async def _wait_until_tasks_empty(timeout: float = 1.0) -> None:
    start = asyncio.get_running_loop().time()
    while dispatch_tasks._active_tasks:
        if asyncio.get_running_loop().time() - start > timeout:
            break
        await asyncio.sleep(0.01)


async def _cancel_active() -> None:
    for task in list(dispatch_tasks._active_tasks):
        task.cancel()
    if dispatch_tasks._active_tasks:
        await asyncio.gather(*list(dispatch_tasks._active_tasks), return_exceptions=True)
    dispatch_tasks._active_tasks.clear()


@pytest.fixture(autouse=True)
async def _cleanup_active_tasks() -> None:
    await _cancel_active()
    dispatch_tasks.configure_dispatch_concurrency(dispatch_tasks.DEFAULT_MAX_CONCURRENCY)
    yield
    await _cancel_active()


@pytest.mark.asyncio
async def test_schedule_dispatch_runs_and_cleans_active_set() -> None:
    harness = BookingHarness()

    active = dispatch_tasks.schedule_dispatch(
        harness.dispatcher(), _effects(), correlation_id="corr-1"
    )

    assert active == 1
    await _wait_until_tasks_empty()
    assert dispatch_tasks.active_dispatch_count() == 0
    assert harness.notifications.notice_types == ["booking_pending"]


@pytest.mark.asyncio
async def test_schedule_dispatch_ignores_empty_input() -> None:
    dispatcher = _StubDispatcher()

    active = dispatch_tasks.schedule_dispatch(dispatcher, [], correlation_id="corr-0")

    assert active == 0
    assert dispatcher.calls == 0


@pytest.mark.asyncio
async def test_task_failure_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("ERROR"):
        dispatch_tasks.schedule_dispatch(
            _StubDispatcher(error=RuntimeError("boom")), _effects(), correlation_id="corr-2"
        )
        await _wait_until_tasks_empty()

    assert "side_effect_dispatch_task_failed" in caplog.text


@pytest.mark.asyncio
async def test_incomplete_report_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    failed = DispatchResult("bk:1:notice:u", "booking_pending", DispatchStatus.FAILED, 3)

    with caplog.at_level("WARNING"):
        dispatch_tasks.schedule_dispatch(
            _StubDispatcher(report=DispatchReport(results=(failed,))),
            _effects(),
            correlation_id="corr-3",
        )
        await _wait_until_tasks_empty()

    assert "side_effect_dispatch_incomplete" in caplog.text


@pytest.mark.asyncio
async def test_concurrency_limit() -> None:
    dispatch_tasks.configure_dispatch_concurrency(1)
    gate = asyncio.Event()
    first = _StubDispatcher(gate=gate)
    second = _StubDispatcher()

    dispatch_tasks.schedule_dispatch(first, _effects(), correlation_id="corr-a")
    dispatch_tasks.schedule_dispatch(second, _effects(), correlation_id="corr-b")
    await asyncio.sleep(0.02)

    assert first.calls == 1
    assert second.calls == 0
    gate.set()
    await _wait_until_tasks_empty()
    assert second.calls == 1


@pytest.mark.asyncio
async def test_drain_returns_immediately_when_empty() -> None:
    await dispatch_tasks.drain_dispatch_tasks(timeout_seconds=0.01)

    assert dispatch_tasks.active_dispatch_count() == 0


@pytest.mark.asyncio
async def test_drain_waits_for_running_tasks() -> None:
    gate = asyncio.Event()
    dispatcher = _StubDispatcher(gate=gate)
    dispatch_tasks.schedule_dispatch(dispatcher, _effects(), correlation_id="corr-4")
    asyncio.get_running_loop().call_later(0.02, gate.set)

    await dispatch_tasks.drain_dispatch_tasks(timeout_seconds=0.5)

    assert gate.is_set()
    assert dispatch_tasks.active_dispatch_count() == 0


@pytest.mark.asyncio
async def test_drain_cancels_pending_tasks(caplog: pytest.LogCaptureFixture) -> None:
    dispatch_tasks.schedule_dispatch(
        _StubDispatcher(gate=asyncio.Event()), _effects(), correlation_id="corr-5"
    )
    await asyncio.sleep(0)

    with caplog.at_level("WARNING"):
        await dispatch_tasks.drain_dispatch_tasks(timeout_seconds=0.01)

    assert "side_effect_dispatch_shutdown_cancelled" in caplog.text
    assert dispatch_tasks.active_dispatch_count() == 0
