"""
Data structures describing a submitted job: the mutable state shared by the
workers and the immutable snapshot handed to pollers.
"""

import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass, field

from pydantic import BaseModel, Field, computed_field

from fetchpool.exceptions import JobStateError


class JobSnapshot(BaseModel):
    """A point-in-time view of a job's counters and per-URL results."""

    job_id: str
    total: int = 0
    completed: int = 0
    success: int = 0
    results: dict[str, str] = Field(default_factory=dict)

    @computed_field
    @property
    def failed(self) -> int:
        return self.completed - self.success

    @computed_field
    @property
    def is_terminal(self) -> bool:
        return self.completed >= self.total

    @classmethod
    def empty(cls, job_id: str) -> "JobSnapshot":
        """The zero-value snapshot returned for identifiers that were never issued."""
        return cls(job_id=job_id)


@dataclass
class JobState:
    """
    Mutable record of one submitted batch.

    Workers report finished items through `record_outcome`, which applies the
    results entry and both counter increments as one update under the job's
    lock. `snapshot` reads under the same lock, so a poller always sees
    `0 <= success_count <= completed_count <= total_count`.
    """

    job_id: str
    urls: tuple[str, ...]
    results: dict[str, str] = field(default_factory=dict)
    completed_count: int = 0
    success_count: int = 0
    created_at: float = field(default_factory=time.monotonic)
    finished_at: float | None = None
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    _terminal: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    def __post_init__(self):
        self.urls = tuple(self.urls)
        if not self.urls:
            self._mark_terminal()

    @classmethod
    def create(cls, job_id: str, urls: Iterable[str]) -> "JobState":
        return cls(job_id=job_id, urls=tuple(urls))

    @property
    def total_count(self) -> int:
        return len(self.urls)

    @property
    def is_terminal(self) -> bool:
        return self.completed_count >= self.total_count

    @property
    def elapsed(self) -> float:
        """Seconds from creation until the job finished (or until now)."""
        end = self.finished_at if self.finished_at is not None else time.monotonic()
        return end - self.created_at

    def _mark_terminal(self) -> None:
        self.finished_at = time.monotonic()
        self._terminal.set()

    async def record_outcome(self, url: str, message: str, success: bool) -> None:
        """
        Records the outcome of one finished item.

        Raises:
            JobStateError: If every item of the job has already been recorded.
        """
        async with self._lock:
            if self.is_terminal:
                raise JobStateError(
                    f"Job '{self.job_id}' is complete; refusing outcome for '{url}'."
                )
            self.results[url] = message
            self.completed_count += 1
            if success:
                self.success_count += 1
            if self.is_terminal:
                self._mark_terminal()

    async def snapshot(self) -> JobSnapshot:
        async with self._lock:
            return JobSnapshot(
                job_id=self.job_id,
                total=self.total_count,
                completed=self.completed_count,
                success=self.success_count,
                results=dict(self.results),
            )

    async def wait_until_terminal(self) -> None:
        await self._terminal.wait()
