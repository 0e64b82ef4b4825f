"""
Storage Layer.

This package handles configuration persistence. Job state is deliberately
kept in memory only and lives in `fetchpool.core`.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
