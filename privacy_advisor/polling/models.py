"""Polling data models."""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union
from datetime import datetime

from ..api.schemas import ScanStatus


class JobState(str, Enum):
    """Scan job lifecycle states."""
    QUEUED = "queued"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.DONE, JobState.ERROR)


@dataclass(frozen=True)
class ScanJob:
    """Snapshot of one scan job as last reported by the server."""
    id: str
    state: JobState = JobState.QUEUED
    progress: int = 0
    input: Optional[str] = None
    slug: Optional[str] = None
    score: Optional[float] = None
    label: Optional[str] = None
    updated_at: Optional[Union[datetime, str]] = None
    has_data: bool = False

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal

    def apply(self, status: ScanStatus) -> "ScanJob":
        """Return the snapshot that results from a server status response."""
        state = JobState(status.status)
        if status.progress is not None:
            progress = status.progress
        elif state is JobState.DONE:
            progress = 100
        else:
            progress = self.progress

        return replace(
            self,
            state=state,
            progress=progress,
            slug=status.slug or self.slug,
            score=status.score if status.score is not None else self.score,
            label=status.label or self.label,
            updated_at=status.updated_at or self.updated_at,
            has_data=True,
        )


@dataclass(frozen=True)
class PollState:
    """Counters owned by one polling session."""
    last_success_at: float
    consecutive_rate_limits: int = 0
    failed_attempts: int = 0
    last_sequence: int = 0
    last_emitted: Optional[ScanJob] = None

    @classmethod
    def start(cls, now: float) -> "PollState":
        return cls(last_success_at=now)


@dataclass(frozen=True)
class PollDecision:
    """What the controller does after one response."""
    emit: Optional[ScanJob] = None
    delay_ms: Optional[int] = None
    error: Optional[Exception] = None

    @property
    def stops(self) -> bool:
        return self.delay_ms is None
