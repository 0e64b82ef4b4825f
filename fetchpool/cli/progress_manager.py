"""
Follows a running job by polling its snapshot and rendering a Rich progress bar.
"""

import asyncio

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from fetchpool.core import JobManager
from fetchpool.models.job import JobSnapshot


class JobProgressManager:
    """
    Renders aggregate progress for one job. It observes the job only through
    `JobManager.poll`, the same way a remote caller would.
    """

    def __init__(self, console: Console, poll_interval: float = 0.5):
        self.console = console
        self.poll_interval = poll_interval
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            "•",
            TextColumn(
                "[green]{task.fields[success]} ok[/green] "
                "[red]{task.fields[failed]} failed[/red]"
            ),
            "•",
            TimeElapsedColumn(),
            console=console,
            transient=False,
        )
        self._task_id: TaskID | None = None

    def update(self, snapshot: JobSnapshot) -> None:
        if self._task_id is None:
            self._task_id = self.progress.add_task(
                "Fetching", total=snapshot.total, success=0, failed=0
            )
        self.progress.update(
            self._task_id,
            total=snapshot.total,
            completed=snapshot.completed,
            success=snapshot.success,
            failed=snapshot.failed,
            description="Done" if snapshot.is_terminal else "Fetching",
        )

    async def follow(self, manager: JobManager, job_id: str) -> JobSnapshot:
        """Polls `job_id` until it is terminal and returns the final snapshot."""
        while True:
            snapshot = await manager.poll(job_id)
            self.update(snapshot)
            if snapshot.is_terminal:
                return snapshot
            await asyncio.sleep(self.poll_interval)

    async def __aenter__(self):
        self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.progress.stop()
