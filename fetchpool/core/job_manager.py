"""
The entry point into the core: submits batches of URLs and serves progress
snapshots while the shared worker pool drives them to completion.
"""

import logging
from collections.abc import Iterable

from fetchpool.exceptions import PoolClosedError
from fetchpool.fetch import Fetcher
from fetchpool.models.config import FetchConfig
from fetchpool.models.job import JobSnapshot
from fetchpool.utils.path import parse_url_lines

from .registry import JobRegistry
from .scheduler import Scheduler

log = logging.getLogger(__name__)


class JobManager:
    """
    Wires the registry, the fetcher and the scheduler together.

    One instance is built at start-up and handed to whatever serves callers
    (the CLI or the HTTP adapter). Use it as an async context manager, or call
    `start` and `shutdown` explicitly.
    """

    def __init__(
        self,
        config: FetchConfig,
        registry: JobRegistry | None = None,
        fetcher: Fetcher | None = None,
        scheduler: Scheduler | None = None,
    ):
        self.config = config
        self.registry = registry or JobRegistry()
        self.fetcher = fetcher or Fetcher(config)
        self.scheduler = scheduler or Scheduler(self.fetcher, config.max_workers)
        self.stats = self.scheduler.stats

    async def start(self) -> None:
        await self.scheduler.start()
        log.debug(
            f"Job manager ready: {self.config.max_workers} workers, "
            f"saving to '{self.config.download_dir}'."
        )

    async def shutdown(self, timeout: float | None = None) -> None:
        """Drains the worker pool, then closes the connection pool."""
        try:
            await self.scheduler.shutdown(timeout)
        finally:
            await self.fetcher.close()

    async def __aenter__(self) -> "JobManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()

    def submit(self, text: str) -> str:
        """
        Submits newline-separated URLs as one job and returns its identifier.
        Lines are trimmed and blank lines are dropped.
        """
        return self.submit_urls(parse_url_lines(text))

    def submit_urls(self, urls: Iterable[str]) -> str:
        """
        Submits an ordered sequence of URLs as one job and returns its identifier.

        Raises:
            PoolClosedError: If the manager is not started or is shutting down.
        """
        if not self.scheduler.is_running:
            raise PoolClosedError("The job manager is not accepting new jobs.")

        cleaned = [url.strip() for url in urls if url and url.strip()]
        job_id = self.registry.create(cleaned)
        job = self.registry.get_state(job_id)
        self.scheduler.submit(job)
        log.info(f"Submitted job {job_id} with {len(cleaned)} URLs.")
        return job_id

    async def poll(self, job_id: str) -> JobSnapshot:
        """Returns the current snapshot; the zero snapshot for unknown identifiers."""
        return await self.registry.get(job_id)

    async def wait(self, job_id: str) -> JobSnapshot:
        """Waits for a job to reach its terminal state and returns its final snapshot."""
        job = self.registry.get_state(job_id)
        if job is not None:
            await job.wait_until_terminal()
        return await self.registry.get(job_id)
