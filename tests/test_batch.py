"""Tests for the batch controller and sequential batch runner."""

import asyncio

import pytest

from sessionhog.models.session import BatchResult
from sessionhog.session_manager.batch import BatchController, BatchRunner


def _runner(session_fn, controller=None) -> BatchRunner:
    return BatchRunner(
        provider=object(),
        base_domain="https://demo.example/",
        controller=controller,
        session_fn=session_fn,
        delay_range_ms=(0, 0),
    )


def test_controller_starts_idle() -> None:
    """A fresh controller is not running and has no snapshot."""
    controller = BatchController()
    assert controller.is_running is False
    assert controller.snapshot() is None


def test_controller_refuses_second_start() -> None:
    """Only one batch may hold the run lock at a time."""
    controller = BatchController()
    assert controller.try_start(5, "scheduled") is True
    assert controller.try_start(7, "on-demand") is False
    assert controller.snapshot()["totalSessions"] == 5


def test_controller_snapshot_survives_finish_and_resets_on_start() -> None:
    """finish releases the lock but keeps stats until the next batch replaces them."""
    controller = BatchController()
    controller.try_start(2, "on-demand")
    controller.record_success()
    controller.record_error(2, "boom")
    controller.finish()

    snapshot = controller.snapshot()
    assert controller.is_running is False
    assert snapshot["completedSessions"] == 1
    assert snapshot["errors"] == [{"session": 2, "error": "boom"}]
    assert snapshot["trigger"] == "on-demand"
    assert "startTime" in snapshot

    assert controller.try_start(3, "scheduled") is True
    assert controller.snapshot()["completedSessions"] == 0
    assert controller.snapshot()["errors"] == []


@pytest.mark.asyncio
async def test_runs_exactly_n_sessions_in_order() -> None:
    """A batch of N performs N attempts with 1-based indices and counts successes."""
    seen = []

    async def session_fn(i, total, provider, base_domain):
        seen.append((i, total))
        return i % 2 == 1

    runner = _runner(session_fn)
    result = await runner.run("on-demand", session_count=5)

    assert result is BatchResult.COMPLETED
    assert seen == [(i, 5) for i in range(1, 6)]
    assert runner.controller.snapshot()["completedSessions"] == 3
    assert runner.controller.is_running is False


@pytest.mark.asyncio
async def test_runs_never_overlap() -> None:
    """Sessions inside one batch execute strictly one at a time."""
    active = 0
    peak = 0

    async def session_fn(i, total, provider, base_domain):
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0)
        active -= 1
        return True

    await _runner(session_fn).run("on-demand", session_count=4)
    assert peak == 1


@pytest.mark.asyncio
async def test_random_count_within_bounds() -> None:
    """Without an explicit count the batch size is drawn from [23, 52]."""
    calls = []

    async def session_fn(i, total, provider, base_domain):
        calls.append(total)
        return True

    runner = _runner(session_fn)
    await runner.run("scheduled")

    assert 23 <= len(calls) <= 52
    assert runner.controller.snapshot()["totalSessions"] == len(calls)


@pytest.mark.asyncio
async def test_escaped_session_error_is_recorded() -> None:
    """A session that raises is recorded and the batch moves on."""

    async def session_fn(i, total, provider, base_domain):
        if i == 2:
            raise RuntimeError("browser vanished")
        return True

    runner = _runner(session_fn)
    result = await runner.run("on-demand", session_count=3)

    snapshot = runner.controller.snapshot()
    assert result is BatchResult.COMPLETED
    assert snapshot["completedSessions"] == 2
    assert snapshot["errors"] == [{"session": 2, "error": "browser vanished"}]


@pytest.mark.asyncio
async def test_skips_when_batch_in_flight() -> None:
    """A second batch is skipped, not failed, and leaves stats untouched."""
    controller = BatchController()
    controller.try_start(9, "scheduled")
    before = controller.snapshot()
    called = False

    async def session_fn(i, total, provider, base_domain):
        nonlocal called
        called = True
        return True

    result = await _runner(session_fn, controller).run("on-demand", session_count=1)

    assert result is BatchResult.SKIPPED
    assert called is False
    assert controller.snapshot() == before
    assert controller.is_running is True


@pytest.mark.asyncio
async def test_orchestration_error_fails_batch_and_releases_lock() -> None:
    """Errors outside a session fail the batch, are recorded as global, and clear the lock."""

    async def session_fn(i, total, provider, base_domain):
        return True

    runner = BatchRunner(
        provider=object(),
        base_domain="https://demo.example/",
        session_fn=session_fn,
        delay_range_ms=(5000, 2000),
    )
    result = await runner.run("on-demand", session_count=1)

    assert result is BatchResult.FAILED
    assert runner.controller.is_running is False
    assert runner.controller.snapshot()["errors"][-1]["session"] == "global"


@pytest.mark.asyncio
async def test_launch_claims_lock_before_returning() -> None:
    """launch sets the run lock synchronously so a second launch is refused."""
    release = asyncio.Event()

    async def session_fn(i, total, provider, base_domain):
        await release.wait()
        return True

    runner = _runner(session_fn)
    task = runner.launch("on-demand", session_count=1)

    assert task is not None
    assert runner.controller.is_running is True
    assert runner.launch("on-demand", session_count=1) is None

    release.set()
    assert await task is BatchResult.COMPLETED
    assert runner.controller.is_running is False


@pytest.mark.asyncio
async def test_drain_gives_up_after_timeout() -> None:
    """drain returns False when the batch outlives the timeout."""
    controller = BatchController()
    controller.try_start(1, "scheduled")
    runner = _runner(None, controller)

    assert await runner.drain(timeout=0.05, poll_interval=0.01) is False


@pytest.mark.asyncio
async def test_drain_returns_when_idle() -> None:
    """drain returns True immediately when nothing is running."""
    assert await _runner(None).drain(timeout=1, poll_interval=0.01) is True
