"""
Dataclass for tracking the outcome of one reconciliation cycle.
"""

import time
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class CycleResult:
    """Records what a single synchronization cycle downloaded, removed and failed on."""

    downloaded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    removed: list[str] = field(default_factory=list)
    cleanup_failed: dict[str, str] = field(default_factory=dict)
    started_at: datetime = field(default_factory=datetime.now)
    duration_s: float = 0.0
    _start_monotonic: float = field(default_factory=time.monotonic, repr=False)

    @property
    def success(self) -> bool:
        """True when every download and every removal succeeded."""
        return not self.failed and not self.cleanup_failed

    def finish(self) -> None:
        """Stamps the elapsed time of the cycle."""
        self.duration_s = time.monotonic() - self._start_monotonic
