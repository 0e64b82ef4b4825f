"""
Provides methods for checking the integrity of downloaded files.
"""

import logging
import os

log = logging.getLogger(__name__)


class FileIntegrityChecker:
    """A collection of static methods for validating downloaded files."""

    @staticmethod
    def file_size(filepath: str) -> int:
        """
        Returns the size of a file in bytes, or -1 if it does not exist or cannot
        be inspected.
        """
        try:
            return os.path.getsize(filepath)
        except OSError:
            return -1

    @staticmethod
    def check_nonempty(filepath: str) -> bool:
        """
        Checks that a downloaded file exists and holds at least one byte.

        A zero-length file is rejected even though the transfer itself
        completed, because it is not a usable artifact.

        Args:
            filepath: Path to the downloaded file.

        Returns:
            True if the file exists and is non-empty, False otherwise.
        """
        size = FileIntegrityChecker.file_size(filepath)
        if size > 0:
            return True
        if size == 0:
            log.warning(f"Integrity check failed for '{filepath}': file is empty.")
        else:
            log.warning(f"Integrity check failed for '{filepath}': file is missing.")
        return False
