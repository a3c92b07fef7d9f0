"""
Poll scheduling for the availability watcher

Runs the poll on a fixed interval and throttles upstream requests.
"""
import asyncio
import time
import logging
from typing import Callable, Awaitable, Optional

logger = logging.getLogger(__name__)


class IntervalScheduler:
    """
    Fixed-interval scheduler.

    Runs the job immediately, then at start + k * interval. A job that overruns
    its slot causes the missed ticks to be skipped rather than queued.
    """

    def __init__(self, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.interval = interval_seconds
        self.runs = 0
        self._cancel_event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self):
        """Stop scheduling and wake any pending wait"""
        self._cancel_event.set()

    def next_deadline(self, started: float, now: float) -> float:
        """First tick strictly after `now`"""
        elapsed = max(0.0, now - started)
        ticks = int(elapsed // self.interval) + 1
        return started + ticks * self.interval

    async def run(
        self,
        func: Callable[[], Awaitable],
        max_runs: Optional[int] = None
    ):
        """
        Run `func` now and then on every tick until cancelled.

        Args:
            func: Async job to run
            max_runs: Stop after this many runs (None = forever)
        """
        started = time.monotonic()

        while not self.cancelled:
            try:
                await func()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.exception(f"Scheduled job failed: {e}")

            self.runs += 1
            if max_runs is not None and self.runs >= max_runs:
                break

            deadline = self.next_deadline(started, time.monotonic())
            if not await self._sleep_until(deadline):
                break

        logger.debug(f"Scheduler stopped after {self.runs} run(s)")

    async def _sleep_until(self, deadline: float) -> bool:
        """Sleep until deadline; False if cancelled first"""
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return not self.cancelled
        try:
            await asyncio.wait_for(self._cancel_event.wait(), timeout=remaining)
        except asyncio.TimeoutError:
            return True
        return False


class RateLimiter:
    """
    Rate limiter for API requests.

    Uses token bucket algorithm.
    """

    def __init__(self, requests_per_second: float = 10.0):
        self.rate = requests_per_second
        self.tokens = requests_per_second
        self.last_update = time.monotonic()
        self._lock = asyncio.Lock()

    async def acquire(self):
        """Wait until a request can be made"""
        async with self._lock:
            now = time.monotonic()
            elapsed = now - self.last_update
            self.tokens = min(self.rate, self.tokens + elapsed * self.rate)
            self.last_update = now

            if self.tokens < 1:
                wait_time = (1 - self.tokens) / self.rate
                await asyncio.sleep(wait_time)
                self.tokens = 0
                self.last_update = time.monotonic()
            else:
                self.tokens -= 1

    async def __aenter__(self):
        await self.acquire()
        return self

    async def __aexit__(self, *args):
        pass


def format_interval(minutes: float) -> str:
    """Format a poll interval as a compact human-readable string"""
    total_seconds = int(round(minutes * 60))

    hours = total_seconds // 3600
    mins = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if mins > 0:
        parts.append(f"{mins}m")
    if seconds > 0 or not parts:
        parts.append(f"{seconds}s")

    return " ".join(parts)
