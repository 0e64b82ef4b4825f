"""
Fetch Layer.

This package is responsible for transferring a single URL to local storage
and validating the resulting file.
"""

from .fetcher import Fetcher, FetchOutcome
from .integrity import FileIntegrityChecker

__all__ = ["Fetcher", "FetchOutcome", "FileIntegrityChecker"]
