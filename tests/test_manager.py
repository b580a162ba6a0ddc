"""Tests for the sessions HTTP service."""

import asyncio

import pytest
from aiohttp.test_utils import TestClient, TestServer

from sessionhog.config import Settings
from sessionhog.session_manager.batch import BatchRunner
from sessionhog.session_manager.manager import create_app

API_KEY = "test-secret"
AUTH = {"x-api-key": API_KEY}


def _settings() -> Settings:
    return Settings(
        browserbase_api_key="bb-key",
        browserbase_project_id="bb-project",
        api_key=API_KEY,
        base_domain="https://demo.example/",
    )


def _runner(session_fn) -> BatchRunner:
    return BatchRunner(
        provider=object(),
        base_domain="https://demo.example/",
        session_fn=session_fn,
        delay_range_ms=(0, 0),
    )


async def _succeed(i, total, provider, base_domain):
    return True


@pytest.mark.asyncio
async def test_health_needs_no_auth() -> None:
    """/health should answer without an API key."""
    app = create_app(_runner(_succeed), _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/health")
        body = await resp.json()

    assert resp.status == 200
    assert body["status"] == "healthy"
    assert body["timezone"] == "America/Los_Angeles"
    assert body["isJobRunning"] is False
    assert body["timestamp"]


@pytest.mark.asyncio
async def test_status_without_key_is_unauthorized() -> None:
    """A missing x-api-key header on /status should yield 401."""
    app = create_app(_runner(_succeed), _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/status")
        body = await resp.json()

    assert resp.status == 401
    assert body == {"status": "error", "message": "Unauthorized"}


@pytest.mark.asyncio
async def test_wrong_key_is_unauthorized() -> None:
    """A mismatched key should be rejected on both protected routes."""
    app = create_app(_runner(_succeed), _settings())
    async with TestClient(TestServer(app)) as client:
        status = await client.get("/status", headers={"x-api-key": "nope"})
        trigger = await client.post("/trigger-sessions", headers={"x-api-key": "nope"}, json={})

    assert status.status == 401
    assert trigger.status == 401


@pytest.mark.asyncio
async def test_status_before_any_batch() -> None:
    """/status reports no current job before the first batch."""
    app = create_app(_runner(_succeed), _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.get("/status", headers=AUTH)
        body = await resp.json()

    assert resp.status == 200
    assert body == {"isJobRunning": False, "currentJob": None}


@pytest.mark.asyncio
async def test_trigger_single_session_then_status() -> None:
    """Triggering one session returns 202, then /status shows the finished batch."""
    runner = _runner(_succeed)
    app = create_app(runner, _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.post("/trigger-sessions", headers=AUTH, json={"sessionCount": 1})
        body = await resp.json()
        assert resp.status == 202
        assert body["status"] == "accepted"
        assert body["config"] == {"sessionCount": 1, "maxConcurrent": 1}

        assert await runner.drain(timeout=5, poll_interval=0.01) is True

        status = await (await client.get("/status", headers=AUTH)).json()

    assert status["isJobRunning"] is False
    assert status["currentJob"]["totalSessions"] == 1
    assert status["currentJob"]["completedSessions"] in (0, 1)
    assert status["currentJob"]["trigger"] == "on-demand"


@pytest.mark.asyncio
async def test_trigger_without_count_reports_random_range() -> None:
    """With no body the batch size is random and the response says so."""
    started = asyncio.Event()
    release = asyncio.Event()

    async def session_fn(i, total, provider, base_domain):
        started.set()
        await release.wait()
        return True

    runner = _runner(session_fn)
    app = create_app(runner, _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.post("/trigger-sessions", headers=AUTH)
        body = await resp.json()
        await started.wait()
        total = runner.controller.snapshot()["totalSessions"]
        release.set()
        await runner.drain(timeout=5, poll_interval=0.01)

    assert resp.status == 202
    assert body["config"]["sessionCount"] == "random(23-52)"
    assert 23 <= total <= 52


@pytest.mark.asyncio
async def test_trigger_while_running_conflicts() -> None:
    """A second trigger during a batch yields 409 with the in-flight stats unchanged."""
    started = asyncio.Event()
    release = asyncio.Event()

    async def session_fn(i, total, provider, base_domain):
        started.set()
        await release.wait()
        return True

    runner = _runner(session_fn)
    app = create_app(runner, _settings())
    async with TestClient(TestServer(app)) as client:
        first = await client.post("/trigger-sessions", headers=AUTH, json={"sessionCount": 2})
        await started.wait()
        before = runner.controller.snapshot()

        second = await client.post("/trigger-sessions", headers=AUTH, json={"sessionCount": 7})
        body = await second.json()
        after = runner.controller.snapshot()

        running = await (await client.get("/status", headers=AUTH)).json()

        release.set()
        await runner.drain(timeout=5, poll_interval=0.01)

    assert first.status == 202
    assert second.status == 409
    assert body["status"] == "error"
    assert body["message"] == "Another job is already running"
    assert body["currentJob"] == before
    assert after == before
    assert running["isJobRunning"] is True
    assert running["currentJob"]["totalSessions"] == 2


@pytest.mark.asyncio
async def test_trigger_rejects_invalid_count() -> None:
    """A non-positive sessionCount is a 400 and starts nothing."""
    runner = _runner(_succeed)
    app = create_app(runner, _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.post("/trigger-sessions", headers=AUTH, json={"sessionCount": 0})
        body = await resp.json()

    assert resp.status == 400
    assert body["status"] == "error"
    assert runner.controller.snapshot() is None


@pytest.mark.asyncio
async def test_trigger_rejects_malformed_json() -> None:
    """Bodies that are not JSON, or not even UTF-8, are a 400."""
    runner = _runner(_succeed)
    app = create_app(runner, _settings())
    headers = {**AUTH, "Content-Type": "application/json"}
    async with TestClient(TestServer(app)) as client:
        bad_json = await client.post("/trigger-sessions", headers=headers, data="{not json")
        bad_bytes = await client.post("/trigger-sessions", headers=headers, data=b"\xff\xfe{")
        bad_bytes_body = await bad_bytes.json()

    assert bad_json.status == 400
    assert bad_bytes.status == 400
    assert bad_bytes_body == {"status": "error", "message": "Request body must be JSON"}
    assert runner.controller.snapshot() is None


@pytest.mark.asyncio
async def test_trigger_rejects_boolean_count() -> None:
    """sessionCount must be a real integer, not a boolean."""
    runner = _runner(_succeed)
    app = create_app(runner, _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.post("/trigger-sessions", headers=AUTH, json={"sessionCount": True})
        body = await resp.json()

    assert resp.status == 400
    assert body["status"] == "error"
    assert runner.controller.snapshot() is None


@pytest.mark.asyncio
async def test_invalid_params_reported_as_params() -> None:
    """Well-formed JSON with bad fields is reported as invalid params, not bad JSON."""
    app = create_app(_runner(_succeed), _settings())
    async with TestClient(TestServer(app)) as client:
        resp = await client.post("/trigger-sessions", headers=AUTH, json={"sessionCount": -3})
        body = await resp.json()

    assert resp.status == 400
    assert body["message"].startswith("Invalid params")
