"""
Data Models Layer.

This package contains the Pydantic configuration model and the dataclass
describing the outcome of a synchronization cycle.
"""

from .config import SyncConfig
from .stats import CycleResult

__all__ = ["CycleResult", "SyncConfig"]
