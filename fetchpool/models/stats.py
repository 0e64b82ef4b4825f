"""
Dataclass for tracking worker pool statistics across all jobs.
"""

import asyncio
import time
from dataclasses import dataclass, field


@dataclass
class PoolStats:
    """Tracks activity of the shared worker pool, including its peak concurrency."""

    fetches_started: int = 0
    fetches_succeeded: int = 0
    fetches_failed: int = 0
    bytes_downloaded: int = 0
    in_flight: int = 0
    peak_in_flight: int = 0
    jobs_submitted: int = 0
    start_time: float = field(default_factory=time.monotonic)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def fetch_started(self) -> None:
        async with self._lock:
            self.fetches_started += 1
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)

    async def fetch_finished(self, success: bool, size: int = 0) -> None:
        """
        Marks one fetch as no longer in flight.

        Args:
            success: Whether the fetch was judged successful.
            size: Bytes written to disk by a successful fetch.
        """
        async with self._lock:
            self.in_flight -= 1
            if success:
                self.fetches_succeeded += 1
                self.bytes_downloaded += size
            else:
                self.fetches_failed += 1

    @property
    def fetches_completed(self) -> int:
        return self.fetches_succeeded + self.fetches_failed

    @property
    def uptime(self) -> float:
        return time.monotonic() - self.start_time
