"""Polling controller for one scan job."""
import asyncio
import inspect
import logging
import time
from typing import AsyncIterator, Awaitable, Callable, Optional

from ..api.models import ApiException
from ..api.schemas import ScanStatus
from .models import PollDecision, PollState, ScanJob
from .policy import on_failure, on_status

logger = logging.getLogger(__name__)

StatusFetcher = Callable[[str], Awaitable[ScanStatus]]


class PollingController:
    """
    Track one scan job until it reaches a terminal state.

    The controller only observes: every snapshot it emits comes from a server
    response. Counters live in a ``PollState`` owned by this instance, so two
    controllers never share state.

    Args:
        fetch_status: coroutine function returning the ``ScanStatus`` for an id
        scan_id: job to track
        target: submitted input, carried on snapshots for display
        sleep: coroutine used between polls (seconds)
        clock: monotonic clock (seconds)
    """

    def __init__(
        self,
        fetch_status: StatusFetcher,
        scan_id: str,
        target: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic
    ):
        self.scan_id = scan_id
        self._fetch_status = fetch_status
        self._sleep = sleep
        self._clock = clock
        self._job = ScanJob(id=scan_id, input=target)
        self._state: Optional[PollState] = None
        self._sequence = 0
        self._cancelled = False

    @property
    def latest(self) -> Optional[ScanJob]:
        """Last emitted snapshot, if any."""
        return self._state.last_emitted if self._state else None

    @property
    def state(self) -> Optional[PollState]:
        return self._state

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Stop polling. A request already in flight is left to finish and ignored."""
        if not self._cancelled:
            logger.debug(f"Polling cancelled for scan {self.scan_id}")
        self._cancelled = True

    async def watch(self) -> AsyncIterator[ScanJob]:
        """
        Yield snapshots until the job is terminal or polling is cancelled.

        Raises:
            NotFoundError: the scan id is unknown
            RateLimitExhaustedError: rate limited past the ceiling
            SchemaError: the status body did not match the contract
            HttpFailure / NetworkError: generic failure after the last attempt
        """
        self._state = PollState.start(self._clock())

        while not self._cancelled:
            decision = await self._poll_once()
            if self._cancelled or decision is None:
                return

            if decision.emit is not None:
                logger.debug(
                    f"Scan {self.scan_id}: {decision.emit.state.value} {decision.emit.progress}%"
                )
                yield decision.emit
                if self._cancelled:
                    return

            if decision.error is not None:
                logger.warning(f"Polling scan {self.scan_id} gave up: {decision.error}")
                raise decision.error

            if decision.stops:
                return

            await self._sleep(decision.delay_ms / 1000)

    async def _poll_once(self) -> Optional[PollDecision]:
        self._sequence += 1
        sequence = self._sequence
        base = self.latest or self._job

        try:
            status = await self._fetch_status(self.scan_id)
        except ApiException as e:
            if self._cancelled:
                return None
            self._state, decision = on_failure(self._state, e, self._clock())
            if decision.delay_ms is not None:
                logger.info(f"Status poll for {self.scan_id} failed ({e}), retrying in {decision.delay_ms}ms")
            return decision

        if self._cancelled:
            return None
        self._state, decision = on_status(self._state, base.apply(status), sequence, self._clock())
        return decision

    async def run(
        self,
        on_snapshot: Optional[Callable[[ScanJob], object]] = None
    ) -> Optional[ScanJob]:
        """
        Poll to completion, passing each snapshot to ``on_snapshot``.

        Returns:
            The last snapshot, or None when cancelled before the job finished.
        """
        async for job in self.watch():
            if on_snapshot is not None:
                result = on_snapshot(job)
                if inspect.isawaitable(result):
                    await result

        if self._cancelled:
            return None
        return self.latest
