"""Polling policy: a pure reducer over server responses.

Nothing here sleeps or performs I/O. Each function takes the current
``PollState`` and returns the next one together with a ``PollDecision``.
"""
from dataclasses import replace
from typing import Optional, Tuple

from ..api.models import (
    NotFoundError,
    RateLimitedError,
    RateLimitExhaustedError,
    SchemaError,
)
from .models import PollDecision, PollState, ScanJob

INITIAL_INTERVAL_MS = 2000
SLOW_INTERVAL_MS = 3000
MEDIUM_INTERVAL_MS = 2500
FAST_INTERVAL_MS = 2000
SLOW_BELOW_PROGRESS = 30
FAST_FROM_PROGRESS = 70

RATE_LIMIT_BASE_MS = 2000
RATE_LIMIT_MAX_MS = 15000
RATE_LIMIT_CEILING_SECONDS = 5 * 60

TRANSIENT_MAX_ATTEMPTS = 3
TRANSIENT_BASE_MS = 1000
TRANSIENT_MAX_MS = 5000


def interval_for_progress(progress: Optional[int]) -> int:
    """Delay before the next poll when no backoff is active."""
    if progress is None:
        return INITIAL_INTERVAL_MS
    if progress < SLOW_BELOW_PROGRESS:
        return SLOW_INTERVAL_MS
    if progress < FAST_FROM_PROGRESS:
        return MEDIUM_INTERVAL_MS
    return FAST_INTERVAL_MS


def interval_for_job(job: Optional[ScanJob]) -> int:
    if job is None or not job.has_data:
        return INITIAL_INTERVAL_MS
    return interval_for_progress(job.progress)


def rate_limit_delay(consecutive: int) -> int:
    """Backoff after ``consecutive`` 429 responses in a row (1-based)."""
    consecutive = max(1, consecutive)
    return min(RATE_LIMIT_BASE_MS * 2 ** (consecutive - 1), RATE_LIMIT_MAX_MS)


def transient_delay(retry_index: int) -> int:
    """Delay before retry number ``retry_index`` (0-based) of a generic failure."""
    return min(TRANSIENT_BASE_MS * 2 ** max(0, retry_index), TRANSIENT_MAX_MS)


def on_status(
    state: PollState,
    candidate: ScanJob,
    sequence: int,
    now: float
) -> Tuple[PollState, PollDecision]:
    """Reduce a successful status response."""
    # Success clock and both failure counters move together.
    state = replace(
        state,
        last_success_at=now,
        consecutive_rate_limits=0,
        failed_attempts=0,
    )
    previous = state.last_emitted

    if sequence <= state.last_sequence:
        return state, PollDecision(delay_ms=interval_for_job(previous))

    if previous is not None and candidate.progress < previous.progress:
        if not candidate.is_terminal:
            return state, PollDecision(delay_ms=interval_for_job(previous))
        candidate = replace(candidate, progress=previous.progress)

    state = replace(state, last_sequence=sequence, last_emitted=candidate)
    if candidate.is_terminal:
        return state, PollDecision(emit=candidate)
    return state, PollDecision(emit=candidate, delay_ms=interval_for_job(candidate))


def on_failure(
    state: PollState,
    error: Exception,
    now: float
) -> Tuple[PollState, PollDecision]:
    """Reduce a failed status request."""
    if isinstance(error, (NotFoundError, SchemaError)):
        return state, PollDecision(error=error)

    if isinstance(error, RateLimitedError):
        if now - state.last_success_at > RATE_LIMIT_CEILING_SECONDS:
            exhausted = RateLimitExhaustedError(
                "Rate limited for too long, please try again later",
                last_failure=error
            )
            return state, PollDecision(error=exhausted)
        count = state.consecutive_rate_limits + 1
        state = replace(state, consecutive_rate_limits=count)
        return state, PollDecision(delay_ms=rate_limit_delay(count))

    attempts = state.failed_attempts + 1
    state = replace(state, failed_attempts=attempts)
    if attempts >= TRANSIENT_MAX_ATTEMPTS:
        return state, PollDecision(error=error)
    return state, PollDecision(delay_ms=transient_delay(attempts - 1))
