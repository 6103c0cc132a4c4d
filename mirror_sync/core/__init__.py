"""
Core synchronization engine.

The `FileSynchronizer` runs one reconciliation cycle at a time; the
`SyncScheduler` repeats cycles on a fixed interval.
"""

from .scheduler import SyncScheduler
from .synchronizer import FileSynchronizer

__all__ = ["FileSynchronizer", "SyncScheduler"]
