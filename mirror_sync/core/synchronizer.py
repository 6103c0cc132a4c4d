"""
The orchestrator for a reconciliation cycle: fetch the manifest, download every
listed file with bounded concurrency, then delete local files no longer listed.
"""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from rich.markup import escape

from mirror_sync.exceptions import (
    CleanupError,
    DownloadBatchError,
    InvalidLocationError,
)
from mirror_sync.models.config import DEFAULT_MAX_CONCURRENT_DOWNLOADS
from mirror_sync.models.stats import CycleResult
from mirror_sync.network.downloader import Downloader
from mirror_sync.network.manifest import ManifestSource
from mirror_sync.storage.local_directory import LocalDirectory
from mirror_sync.utils.path import file_name_from_location
from mirror_sync.utils.structured_logger import SyncEventLogger

log = logging.getLogger(__name__)


class FileSynchronizer:
    """
    Keeps a destination directory mirroring the files listed by a manifest source.

    The synchronizer holds no state between cycles; the directory is scanned
    afresh whenever it is needed.
    """

    def __init__(
        self,
        destination_path: Path | str,
        manifest_source: ManifestSource,
        downloader: Downloader | None = None,
        max_concurrent_downloads: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS,
        events: SyncEventLogger | None = None,
    ):
        """
        Args:
            destination_path: Directory owned by this synchronizer.
            manifest_source: Supplies the authoritative list of remote locations.
            downloader: Downloader writing into the destination. One is created
                when omitted.
            max_concurrent_downloads: Upper bound on in-flight downloads.
            events: Optional structured event logger.
        """
        if max_concurrent_downloads < 1:
            raise ValueError("max_concurrent_downloads must be at least 1.")
        self.directory = LocalDirectory(destination_path)
        self.manifest_source = manifest_source
        self.downloader = downloader or Downloader(
            self.directory, max_connections=max_concurrent_downloads
        )
        self.max_concurrent_downloads = max_concurrent_downloads
        self.events = events
        self.last_cleanup_failures: dict[str, str] = {}

    async def __aenter__(self) -> "FileSynchronizer":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Closes network sessions held by the downloader and manifest source."""
        await self.downloader.close()
        await self.manifest_source.close()

    def load_stored_files(self) -> set[str]:
        """Returns the names of stored files, creating the directory if needed."""
        if not self.directory.path.is_dir():
            log.warning(
                "[yellow]Directory for storing data doesn't exist! "
                "Creating a new one...[/yellow]"
            )
            self.directory.ensure_exists()
            log.info(
                f"[green]✓ Directory {escape(str(self.directory.path))} was "
                "successfully created.[/green]"
            )
            return set()
        return self.directory.list_files()

    async def get_desired_state(self) -> tuple[list[str], list[str]]:
        """
        Queries the manifest source once.

        Returns:
            The list of remote locations and the index-paired list of local file
            names derived from them.

        Raises:
            ManifestFetchError: If the manifest cannot be fetched or parsed.
        """
        raw_locations = await self.manifest_source.fetch_locations()

        unique_locations = list(dict.fromkeys(raw_locations))
        if len(unique_locations) < len(raw_locations):
            log.debug(
                f"Removed {len(raw_locations) - len(unique_locations)} duplicate "
                "locations from manifest."
            )

        locations: list[str] = []
        names: list[str] = []
        owners: dict[str, str] = {}
        for location in unique_locations:
            try:
                name = file_name_from_location(location)
            except InvalidLocationError as e:
                log.warning(
                    f"[yellow]⚠ Skipping manifest entry: {escape(str(e))}[/yellow]"
                )
                continue
            if name in owners:
                log.warning(
                    f"[yellow]⚠ '{escape(location)}' and '{escape(owners[name])}' "
                    f"both map to '{escape(name)}'; the last one written wins."
                    "[/yellow]"
                )
            owners[name] = location
            locations.append(location)
            names.append(name)

        return locations, names

    async def refresh_files(self, locations: Iterable[str]) -> list[str]:
        """
        Downloads every location, never running more than the configured number
        of downloads at once.

        All downloads are attempted even when some fail. Failures are reported
        together once the whole batch has finished.

        Returns:
            The file names written, in the order of `locations`.

        Raises:
            DownloadBatchError: If at least one download failed.
        """
        locations = list(locations)
        if not locations:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrent_downloads)

        async def download_single(location: str) -> str:
            async with semaphore:
                return await self.downloader.download(location)

        tasks = [download_single(location) for location in locations]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        succeeded: list[str] = []
        errors: dict[str, Exception] = {}
        for location, result in zip(locations, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                errors[location] = result
                log.error(f"[red]✗ {escape(str(result))}[/red]")
                if self.events:
                    self.events.download_failed(location, str(result))
            else:
                succeeded.append(result)
                if self.events:
                    self.events.file_downloaded(location, result)

        if errors:
            raise DownloadBatchError(errors, succeeded)
        return succeeded

    def cleanup_old_files(self, desired_names: Iterable[str]) -> list[str]:
        """
        Deletes every stored file whose name is not in `desired_names`.

        A file that cannot be deleted is logged and skipped; the failures of the
        most recent call are kept in `last_cleanup_failures`.

        Returns:
            The names of the files removed.
        """
        desired = set(desired_names)
        removed: list[str] = []
        self.last_cleanup_failures = {}

        for file_name in sorted(self.directory.list_files()):
            if file_name in desired:
                continue
            try:
                self.directory.delete(file_name)
            except CleanupError as e:
                self.last_cleanup_failures[file_name] = e.reason
                log.warning(f"[yellow]⚠ {escape(str(e))}[/yellow]")
                if self.events:
                    self.events.cleanup_failed(file_name, e.reason)
                continue
            removed.append(file_name)
            log.info(f"Removed unnecessary/old file: [dim]{escape(file_name)}[/dim]")
            if self.events:
                self.events.file_removed(file_name)

        return removed

    async def run_cycle(self) -> CycleResult:
        """
        Runs one reconciliation cycle: manifest, then downloads, then cleanup.

        Download failures are recorded in the result and do not prevent cleanup,
        since failed names are still part of the desired set.

        Raises:
            ManifestFetchError: If the manifest cannot be fetched.
            DirectoryAccessError: If the destination cannot be created or read.
        """
        result = CycleResult()
        if self.events:
            self.events.cycle_started(str(self.directory.path))

        try:
            locations, names = await self.get_desired_state()
        except Exception as e:
            if self.events:
                self.events.manifest_failed(str(e))
            raise

        try:
            result.downloaded = await self.refresh_files(locations)
        except DownloadBatchError as e:
            result.downloaded = e.succeeded
            result.failed = {loc: str(err) for loc, err in e.errors.items()}

        result.removed = self.cleanup_old_files(names)
        result.cleanup_failed = dict(self.last_cleanup_failures)
        result.finish()

        if self.events:
            self.events.cycle_completed(
                result.duration_s,
                downloaded=len(result.downloaded),
                failed=len(result.failed),
                removed=len(result.removed),
                cleanup_failed=len(result.cleanup_failed),
            )
        return result
