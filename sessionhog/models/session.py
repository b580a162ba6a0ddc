"""Pydantic models for remote sessions and batch state."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..constants import REPLAY_URL


class RemoteSession(BaseModel):
    """Handle to a provisioned remote browser."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    connect_url: str = Field(alias="connectUrl")
    region: str = ""
    proxy: Optional[dict] = None

    @property
    def replay_url(self) -> str:
        return f"{REPLAY_URL}{self.id}"


class RunError(BaseModel):
    """A run that failed past the session loop's own boundary."""

    session: Union[int, str]  # run index, or "global" for orchestration errors
    error: str


class JobStats(BaseModel):
    """Progress of the current (or most recent) batch."""

    model_config = ConfigDict(populate_by_name=True)

    start_time: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        alias="startTime",
    )
    completed_sessions: int = Field(default=0, alias="completedSessions")
    total_sessions: int = Field(default=0, alias="totalSessions")
    trigger: str = ""
    errors: list[RunError] = Field(default_factory=list)


class TriggerRequest(BaseModel):
    """Body of POST /trigger-sessions."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_count: Optional[int] = Field(default=None, ge=1, strict=True, alias="sessionCount")
    # Accepted for compatibility; runs are always sequential
    max_concurrent: int = Field(default=1, ge=1, alias="maxConcurrent")


class BatchResult(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"
