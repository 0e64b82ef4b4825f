"""
Core application engine for orchestrating batch fetches.

This package contains the primary logic. The `JobManager` acts as the
high-level coordinator, registering each submitted job with the `JobRegistry`
and handing its items to the `Scheduler`, whose shared worker pool invokes the
fetcher for each URL.
"""

from .job_manager import JobManager
from .registry import JobRegistry
from .scheduler import Scheduler

__all__ = ["JobManager", "JobRegistry", "Scheduler"]
