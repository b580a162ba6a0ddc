"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from typing import Mapping, Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Remote browser provider
BROWSERBASE_API_URL = os.getenv("BROWSERBASE_API_URL", "https://api.browserbase.com")
BROWSERBASE_REGION = os.getenv("BROWSERBASE_REGION", "us-east-1")
PROVIDER_TIMEOUT = 60.0

# Browser
SESSION_TIMEOUT_MS = 120000
LANDING_TIMEOUT_MS = 60000
INTERSTITIAL_TIMEOUT_MS = 5000

# Batches
SESSION_COUNT_MIN = 23
SESSION_COUNT_MAX = 52
INTER_SESSION_DELAY_MS = (2000, 5000)

# Shutdown
SHUTDOWN_DRAIN_SECONDS = 300
SHUTDOWN_POLL_SECONDS = 5

DEFAULT_BASE_DOMAIN = "https://posthog-demo-3000.fly.dev/"
DEFAULT_TIMEZONE = "America/Los_Angeles"


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed."""


class Settings(BaseModel):
    """Validated runtime settings for the service."""

    browserbase_api_key: str
    browserbase_project_id: str
    api_key: str
    base_domain: str = DEFAULT_BASE_DOMAIN
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    timezone: str = DEFAULT_TIMEZONE

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _is_valid_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Read and validate settings from the environment.

    Every problem is collected so a misconfigured deploy reports them all
    at once.

    Raises:
        ConfigError: if a required secret is missing or a value is malformed.
    """
    env = os.environ if environ is None else environ
    problems: list[str] = []

    def required(name: str) -> str:
        value = env.get(name, "").strip()
        if not value:
            problems.append(f"{name} is required but not set")
        return value

    api_key = required("BROWSERBASE_API_KEY")
    project_id = required("BROWSERBASE_PROJECT_ID")
    service_key = required("API_KEY")

    base_domain = env.get("BASE_DOMAIN", "").strip() or DEFAULT_BASE_DOMAIN
    if not _is_valid_url(base_domain):
        problems.append(f"BASE_DOMAIN must be a valid URL (got {base_domain!r})")
    elif not base_domain.endswith("/"):
        base_domain += "/"

    port = 3000
    raw_port = env.get("PORT", "").strip()
    if raw_port:
        try:
            port = int(raw_port)
        except ValueError:
            problems.append(f"PORT must be an integer (got {raw_port!r})")
        else:
            if not 1 <= port <= 65535:
                problems.append(f"PORT must be between 1 and 65535 (got {port})")

    timezone = env.get("TZ", "").strip() or DEFAULT_TIMEZONE
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError):
        problems.append(f"TZ must be a known time zone (got {timezone!r})")

    if problems:
        raise ConfigError("; ".join(problems))

    return Settings(
        browserbase_api_key=api_key,
        browserbase_project_id=project_id,
        api_key=service_key,
        base_domain=base_domain,
        host=env.get("HOST", "").strip() or "0.0.0.0",
        port=port,
        timezone=timezone,
    )
