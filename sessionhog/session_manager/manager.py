"""Sessions HTTP service.

Thin aiohttp layer over the batch runner.

Endpoints:
    GET  /health            - Liveness, no auth
    GET  /status            - Run lock and current batch stats (x-api-key)
    POST /trigger-sessions  - Start an on-demand batch (x-api-key)
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timezone

from aiohttp import web
from pydantic import ValidationError

from ..config import SESSION_COUNT_MAX, SESSION_COUNT_MIN, Settings
from ..models.session import TriggerRequest
from .batch import BatchRunner

logger = logging.getLogger(__name__)


def _error(message: str, status: int, **extra) -> web.Response:
    return web.json_response({"status": "error", "message": message, **extra}, status=status)


@web.middleware
async def api_key_middleware(request: web.Request, handler):
    if getattr(handler, "requires_api_key", False):
        expected: str = request.app["settings"].api_key
        provided = request.headers.get("x-api-key", "")
        if not provided or not hmac.compare_digest(provided.encode(), expected.encode()):
            return _error("Unauthorized", 401)
    return await handler(request)


def requires_api_key(handler):
    handler.requires_api_key = True
    return handler


# ── HTTP Handlers ────────────────────────────────────────────────────────────


async def handle_health(request: web.Request) -> web.Response:
    runner: BatchRunner = request.app["runner"]
    settings: Settings = request.app["settings"]
    return web.json_response({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "timezone": settings.timezone,
        "isJobRunning": runner.controller.is_running,
    })


@requires_api_key
async def handle_status(request: web.Request) -> web.Response:
    runner: BatchRunner = request.app["runner"]
    return web.json_response({
        "isJobRunning": runner.controller.is_running,
        "currentJob": runner.controller.snapshot(),
    })


@requires_api_key
async def handle_trigger_sessions(request: web.Request) -> web.Response:
    runner: BatchRunner = request.app["runner"]

    if runner.controller.is_running:
        return _error(
            "Another job is already running",
            409,
            currentJob=runner.controller.snapshot(),
        )

    try:
        body = await request.json() if request.can_read_body else {}
        params = TriggerRequest.model_validate(body or {})
    except ValidationError as e:
        return _error(f"Invalid params: {e.errors(include_url=False)}", 400)
    except ValueError:
        # JSONDecodeError and UnicodeDecodeError
        return _error("Request body must be JSON", 400)

    task = runner.launch("on-demand", params.session_count)
    if task is None:
        return _error(
            "Another job is already running",
            409,
            currentJob=runner.controller.snapshot(),
        )

    logger.info(f"On-demand batch accepted (sessionCount={params.session_count})")
    return web.json_response(
        {
            "status": "accepted",
            "message": "Session simulation started",
            "config": {
                "sessionCount": params.session_count
                or f"random({SESSION_COUNT_MIN}-{SESSION_COUNT_MAX})",
                "maxConcurrent": params.max_concurrent,
            },
        },
        status=202,
    )


# ── App Factory ──────────────────────────────────────────────────────────────


def create_app(runner: BatchRunner, settings: Settings) -> web.Application:
    app = web.Application(middlewares=[api_key_middleware])
    app["runner"] = runner
    app["settings"] = settings

    app.router.add_get("/health", handle_health)
    app.router.add_get("/status", handle_status)
    app.router.add_post("/trigger-sessions", handle_trigger_sessions)

    return app
