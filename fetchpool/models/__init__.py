"""
Data Models Layer.

This package contains the Pydantic models and dataclasses that define the core
data structures used throughout the application, such as configuration, job
state and pool statistics.
"""

from .config import FetchConfig
from .job import JobSnapshot, JobState
from .stats import PoolStats

__all__ = ["FetchConfig", "JobSnapshot", "JobState", "PoolStats"]
