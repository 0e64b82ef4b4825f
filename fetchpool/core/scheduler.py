"""
A fixed-size pool of worker tasks shared by every submitted job.
"""

import asyncio
import logging

from rich.markup import escape

from fetchpool.exceptions import JobStateError, PoolClosedError
from fetchpool.fetch import Fetcher, FetchOutcome
from fetchpool.fetch.fetcher import describe_error
from fetchpool.models.job import JobState
from fetchpool.models.stats import PoolStats

log = logging.getLogger(__name__)

CANCELLED_MESSAGE = "Error: cancelled by shutdown"


class Scheduler:
    """
    Drives jobs to completion with at most `max_workers` fetches in flight.

    `max_workers` long-lived worker tasks pull (job, url) items from one shared
    queue. Submitting a job only enqueues its items, so jobs submitted back to
    back interleave on the same pool and never wait for each other.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        max_workers: int = 5,
        stats: PoolStats | None = None,
    ):
        self.fetcher = fetcher
        self.max_workers = max_workers
        self.stats = stats or PoolStats()
        self._queue: asyncio.Queue[tuple[JobState, str]] | None = None
        self._workers: list[asyncio.Task] = []
        self._closed = False

    @property
    def is_running(self) -> bool:
        return bool(self._workers) and not self._closed

    @property
    def pending(self) -> int:
        """Number of items queued but not yet picked up by a worker."""
        return self._queue.qsize() if self._queue else 0

    async def start(self) -> None:
        """Spawns the worker tasks. Calling it on a running pool is a no-op."""
        if self._closed:
            raise PoolClosedError("The worker pool has been shut down.")
        if self._workers:
            return
        self._queue = asyncio.Queue()
        self._workers = [
            asyncio.create_task(self._worker_loop(i), name=f"fetch-worker-{i}")
            for i in range(self.max_workers)
        ]
        log.debug(f"Started worker pool with {self.max_workers} workers.")

    def submit(self, job: JobState) -> None:
        """
        Queues every URL of `job` on the shared pool without waiting.

        Raises:
            PoolClosedError: If the pool is not started or is shutting down.
        """
        if not self.is_running or self._queue is None:
            raise PoolClosedError("The worker pool is not accepting new jobs.")
        for url in job.urls:
            self._queue.put_nowait((job, url))
        self.stats.jobs_submitted += 1
        log.debug(f"Queued {job.total_count} items for job {job.job_id}")

    async def run(self, job: JobState) -> None:
        """Submits `job` and returns once every one of its items has finished."""
        self.submit(job)
        await job.wait_until_terminal()

    async def _worker_loop(self, worker_id: int) -> None:
        assert self._queue is not None
        while True:
            job, url = await self._queue.get()
            try:
                await self._process_item(job, url)
            except JobStateError as e:
                log.error(f"[red]✗ {escape(str(e))}[/red]")
            finally:
                self._queue.task_done()

    async def _process_item(self, job: JobState, url: str) -> None:
        """Fetches one item and records its outcome on the owning job."""
        await self.stats.fetch_started()
        outcome: FetchOutcome | None = None
        try:
            outcome = await self.fetcher.fetch(url)
        except asyncio.CancelledError:
            await self._abandon(job, url)
            raise
        except Exception as e:
            log.error(
                f"[red]✗ Worker fault while fetching {escape(url)}: "
                f"{describe_error(e)}[/red]",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            outcome = FetchOutcome.failure(f"Error: {describe_error(e)}")
        finally:
            await self.stats.fetch_finished(
                success=bool(outcome and outcome.success),
                size=outcome.size if outcome else 0,
            )

        await self._record(job, url, outcome)

    async def _record(self, job: JobState, url: str, outcome: FetchOutcome) -> None:
        await job.record_outcome(url, outcome.message, outcome.success)
        if job.is_terminal:
            log.info(
                f"Job {job.job_id} finished: {job.success_count}/"
                f"{job.total_count} succeeded."
            )

    async def _abandon(self, job: JobState, url: str) -> None:
        """Records an item the pool gave up on, so its job can still finish."""
        try:
            await self._record(job, url, FetchOutcome.failure(CANCELLED_MESSAGE))
        except JobStateError as e:
            log.error(f"[red]✗ {escape(str(e))}[/red]")

    async def shutdown(self, timeout: float | None = None) -> None:
        """
        Stops accepting work, lets queued and in-flight items drain, then stops
        the workers. With `timeout`, draining is abandoned after that many
        seconds and the remaining workers are cancelled; every item that did not
        finish is recorded as a cancelled failure, so no job is left waiting.
        """
        if self._closed:
            return
        self._closed = True
        if not self._workers or self._queue is None:
            return

        if self.pending or self.stats.in_flight:
            log.info(
                f"Draining worker pool ({self.pending} queued, "
                f"{self.stats.in_flight} in flight)..."
            )
        try:
            await asyncio.wait_for(self._queue.join(), timeout)
        except asyncio.TimeoutError:
            log.warning(
                f"[yellow]Worker pool did not drain within {timeout}s; "
                f"cancelling {self.pending} queued items.[/yellow]"
            )

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        while not self._queue.empty():
            job, url = self._queue.get_nowait()
            self._queue.task_done()
            await self._abandon(job, url)
        log.debug("Worker pool stopped.")
