"""Tests for the pure polling policy."""
import pytest

from privacy_advisor.api import HttpFailure, NotFoundError, RateLimitedError, RateLimitExhaustedError
from privacy_advisor.polling import (
    JobState,
    PollState,
    ScanJob,
    interval_for_progress,
    on_failure,
    on_status,
    rate_limit_delay,
    transient_delay,
)


def job(progress, state=JobState.RUNNING):
    return ScanJob(id="s1", state=state, progress=progress, has_data=True)


class TestIntervals:
    @pytest.mark.parametrize("progress, expected", [
        (None, 2000),
        (0, 3000),
        (29, 3000),
        (30, 2500),
        (69, 2500),
        (70, 2000),
        (100, 2000),
    ])
    def test_interval_for_progress(self, progress, expected):
        assert interval_for_progress(progress) == expected

    def test_rate_limit_delay_doubles_up_to_cap(self):
        assert [rate_limit_delay(n) for n in range(1, 6)] == [2000, 4000, 8000, 15000, 15000]

    def test_transient_delay(self):
        assert [transient_delay(i) for i in range(4)] == [1000, 2000, 4000, 5000]


class TestOnStatus:
    def test_emits_and_schedules_next_poll(self):
        state, decision = on_status(PollState.start(0), job(10), 1, now=1)
        assert decision.emit.progress == 10
        assert decision.delay_ms == 3000
        assert state.last_emitted.progress == 10

    def test_regressing_progress_is_suppressed(self):
        state, _ = on_status(PollState.start(0), job(40), 1, now=1)
        state, decision = on_status(state, job(25), 2, now=2)
        assert decision.emit is None
        assert decision.delay_ms == 2500
        assert state.last_emitted.progress == 40

    def test_stale_sequence_is_ignored(self):
        state, _ = on_status(PollState.start(0), job(50), 2, now=1)
        state, decision = on_status(state, job(60), 1, now=2)
        assert decision.emit is None
        assert state.last_emitted.progress == 50

    def test_terminal_stops_and_keeps_max_progress(self):
        state, _ = on_status(PollState.start(0), job(80), 1, now=1)
        _, decision = on_status(state, job(0, JobState.ERROR), 2, now=2)
        assert decision.emit.state is JobState.ERROR
        assert decision.emit.progress == 80
        assert decision.stops

    def test_success_resets_failure_counters(self):
        state = PollState(last_success_at=0, consecutive_rate_limits=3, failed_attempts=2)
        state, _ = on_status(state, job(10), 1, now=42)
        assert state.consecutive_rate_limits == 0
        assert state.failed_attempts == 0
        assert state.last_success_at == 42


class TestOnFailure:
    def test_not_found_is_terminal(self):
        error = NotFoundError("gone", status=404)
        _, decision = on_failure(PollState.start(0), error, now=1)
        assert decision.error is error
        assert decision.stops

    def test_rate_limit_backs_off(self):
        state = PollState.start(0)
        delays = []
        for i in range(3):
            state, decision = on_failure(state, RateLimitedError("slow", status=429), now=i)
            delays.append(decision.delay_ms)
        assert delays == [2000, 4000, 8000]

    def test_rate_limit_exhausted_after_ceiling(self):
        last = RateLimitedError("slow", status=429)
        _, decision = on_failure(PollState.start(0), last, now=301)
        assert isinstance(decision.error, RateLimitExhaustedError)
        assert decision.error.last_failure is last

    def test_generic_failure_gives_up_on_third_attempt(self):
        state = PollState.start(0)
        error = HttpFailure("boom", status=500)
        state, first = on_failure(state, error, now=1)
        state, second = on_failure(state, error, now=2)
        state, third = on_failure(state, error, now=3)
        assert (first.delay_ms, second.delay_ms) == (1000, 2000)
        assert third.error is error
