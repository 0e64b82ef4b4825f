"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class FetchPoolError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(FetchPoolError):
    """Raised for issues related to configuration loading or validation."""


class PoolClosedError(FetchPoolError):
    """Raised when work is submitted to a worker pool that is not running."""


class JobStateError(FetchPoolError):
    """
    Raised when an outcome is recorded on a job that has already reached its
    terminal state.
    """
