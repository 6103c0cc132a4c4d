"""
Runs reconciliation cycles on a fixed interval until stopped.
"""

import asyncio
import logging
from contextlib import suppress

from rich.markup import escape

from mirror_sync.exceptions import (
    DirectoryAccessError,
    ManifestFetchError,
    MirrorSyncError,
)
from mirror_sync.models.config import DEFAULT_INTERVAL_SECONDS
from mirror_sync.models.stats import CycleResult
from mirror_sync.utils.formatting import format_duration, format_file_list

from .synchronizer import FileSynchronizer

log = logging.getLogger(__name__)


class SyncScheduler:
    """Repeatedly invokes a FileSynchronizer, waiting a fixed interval between cycles."""

    def __init__(
        self,
        synchronizer: FileSynchronizer,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
    ):
        self.synchronizer = synchronizer
        self.interval_seconds = interval_seconds
        self.cycles_run = 0
        self.last_result: CycleResult | None = None
        self._stop_event = asyncio.Event()

    def stop(self) -> None:
        """Requests the loop to finish after the current cycle."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    async def run(self, max_cycles: int | None = None) -> None:
        """
        Runs cycles until stop() is called or `max_cycles` cycles have completed.

        A failed manifest fetch skips the cycle; the next attempt happens after
        the regular interval.
        """
        stored = self.synchronizer.load_stored_files()
        log.info(
            "Loaded stored files from the previous start-up:\n"
            f"{escape(format_file_list(stored))}"
        )

        while not self.stopped:
            await self.run_once()
            self.cycles_run += 1
            if max_cycles is not None and self.cycles_run >= max_cycles:
                break
            await self._wait_interval()

        log.debug(f"Scheduler stopped after {self.cycles_run} cycle(s).")

    async def run_once(self) -> CycleResult | None:
        """Runs a single cycle, logging instead of raising on application errors."""
        try:
            result = await self.synchronizer.run_cycle()
        except ManifestFetchError as e:
            log.warning(
                f"[yellow]⚠ Could not fetch manifest, skipping this cycle: "
                f"{escape(str(e))}[/yellow]"
            )
            return None
        except MirrorSyncError as e:
            log.error(f"[red]✗ Synchronization cycle failed: {escape(str(e))}[/red]")
            return None

        self.last_result = result
        self._log_result(result)
        return result

    def _log_result(self, result: CycleResult) -> None:
        status = "[green]✓[/green]" if result.success else "[yellow]⚠[/yellow]"
        log.info(
            f"{status} Cycle finished in {format_duration(result.duration_s)}: "
            f"{len(result.downloaded)} downloaded, {len(result.failed)} failed, "
            f"{len(result.removed)} removed."
        )
        try:
            stored = self.synchronizer.directory.list_files()
        except DirectoryAccessError as e:
            log.error(f"[red]✗ Could not list stored files: {escape(str(e))}[/red]")
            return
        log.info(f"Stored files:\n{escape(format_file_list(stored))}")

    async def _wait_interval(self) -> None:
        with suppress(asyncio.TimeoutError):
            await asyncio.wait_for(
                self._stop_event.wait(), timeout=self.interval_seconds
            )
