"""Scan job polling package."""
from .models import JobState, ScanJob, PollState, PollDecision
from .policy import (
    interval_for_progress,
    rate_limit_delay,
    transient_delay,
    on_status,
    on_failure,
)
from .controller import PollingController

__all__ = [
    "JobState",
    "ScanJob",
    "PollState",
    "PollDecision",
    "interval_for_progress",
    "rate_limit_delay",
    "transient_delay",
    "on_status",
    "on_failure",
    "PollingController",
]
