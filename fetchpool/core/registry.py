"""
Process-wide registry mapping job identifiers to their state.
"""

import logging
import uuid
from collections.abc import Iterable

from fetchpool.models.job import JobSnapshot, JobState

log = logging.getLogger(__name__)


class JobRegistry:
    """
    In-memory lookup from job identifier to `JobState`.

    Entries are added on submission and never removed, so the registry lives
    exactly as long as the process. `create` has no suspension point, which
    keeps concurrent submissions on the event loop from losing inserts.
    """

    def __init__(self):
        self._jobs: dict[str, JobState] = {}

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: object) -> bool:
        return job_id in self._jobs

    def _new_job_id(self) -> str:
        job_id = uuid.uuid4().hex
        while job_id in self._jobs:
            job_id = uuid.uuid4().hex
        return job_id

    def create(self, urls: Iterable[str]) -> str:
        """Registers a new job for `urls` and returns its identifier."""
        job_id = self._new_job_id()
        job = JobState.create(job_id, urls)
        self._jobs[job_id] = job
        log.debug(f"Registered job {job_id} with {job.total_count} URLs")
        return job_id

    def get_state(self, job_id: str) -> JobState | None:
        return self._jobs.get(job_id)

    async def get(self, job_id: str) -> JobSnapshot:
        """
        Returns the current snapshot for `job_id`, or the zero-value snapshot
        when the identifier was never issued by this registry.
        """
        job = self._jobs.get(job_id)
        if job is None:
            return JobSnapshot.empty(job_id)
        return await job.snapshot()
