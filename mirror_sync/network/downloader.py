"""
Handles the low-level downloading of a single remote file over HTTP into the
managed destination directory.
"""

import asyncio
import logging

import aiofiles
import aiohttp
from rich.markup import escape

from mirror_sync.exceptions import (
    DirectoryAccessError,
    DownloadError,
    InvalidLocationError,
)
from mirror_sync.storage.local_directory import LocalDirectory
from mirror_sync.utils.formatting import format_size
from mirror_sync.utils.path import file_name_from_location

log = logging.getLogger(__name__)


def create_session(
    max_connections: int = 3, timeout: float | None = 300.0
) -> aiohttp.ClientSession:
    """
    Creates an aiohttp ClientSession tuned for file downloads.

    Args:
        max_connections: Connection pool size, matched to the download concurrency.
        timeout: Total deadline in seconds for each request (None disables it).
    """
    connector = aiohttp.TCPConnector(
        limit=max_connections * 2,
        limit_per_host=max_connections,
        ttl_dns_cache=600,
        enable_cleanup_closed=True,
    )
    return aiohttp.ClientSession(
        connector=connector,
        timeout=aiohttp.ClientTimeout(total=timeout, sock_connect=15),
    )


class Downloader:
    """Fetches one remote resource and writes it into the destination directory."""

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(
        self,
        directory: LocalDirectory,
        session: aiohttp.ClientSession | None = None,
        timeout: float | None = 300.0,
        max_connections: int = 3,
    ):
        """
        Args:
            directory: The managed destination directory.
            session: An existing session to reuse. Injected sessions are left open
                by close().
            timeout: Total deadline in seconds for a single download.
            max_connections: Pool size used when the downloader creates its own
                session.
        """
        self.directory = directory
        self.timeout = timeout
        self.max_connections = max_connections
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = create_session(self.max_connections, self.timeout)
            self._owns_session = True
            log.debug(f"Created download session with limit={self.max_connections}")
        return self._session

    async def close(self) -> None:
        """Closes the download session if this downloader created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            log.debug("Download session closed.")

    async def download(self, location: str) -> str:
        """
        Downloads a remote file, overwriting any local file with the same name.

        Returns:
            The local file name the body was written to.

        Raises:
            DownloadError: If the fetch fails (non-2xx status, connection error,
            timeout) or the body cannot be written locally.
        """
        try:
            file_name = file_name_from_location(location)
        except InvalidLocationError as e:
            raise DownloadError(location, str(e)) from e

        log.info(f"Downloading file [cyan]{escape(location)}[/cyan] ...")
        session = self._get_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        try:
            async with session.get(location, timeout=timeout) as response:
                if not 200 <= response.status < 300:
                    reason = f"HTTP {response.status} {response.reason or ''}"
                    raise DownloadError(location, reason.strip())

                self.directory.ensure_exists()
                size = await self._write_body(response, file_name)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            reason = "timed out" if isinstance(e, asyncio.TimeoutError) else str(e)
            raise DownloadError(location, reason or type(e).__name__) from e
        except (OSError, DirectoryAccessError) as e:
            raise DownloadError(location, f"write failed: {e}") from e

        log.debug(f"Saved '{file_name}' ({format_size(size)})")
        return file_name

    async def _write_body(
        self, response: aiohttp.ClientResponse, file_name: str
    ) -> int:
        """Streams the response body into the destination file, truncating it first."""
        written = 0
        async with aiofiles.open(self.directory.path_for(file_name), "wb") as f:
            async for chunk in response.content.iter_chunked(self.CHUNK_SIZE):
                await f.write(chunk)
                written += len(chunk)
        return written
