"""
Remote manifest sources: the authoritative list of file locations to mirror.

A manifest is always a full snapshot. It may be a JSON array of URLs, a JSON
object holding such an array under ``"files"`` or ``"uris"``, or plain text
with one URL per line (blank lines and ``#`` comments are ignored).
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiofiles
import aiohttp

from mirror_sync.exceptions import ManifestFetchError

log = logging.getLogger(__name__)

_LIST_KEYS = ("files", "uris")


@runtime_checkable
class ManifestSource(Protocol):
    """Supplies the current set of remote file locations on demand."""

    async def fetch_locations(self) -> list[str]: ...

    async def close(self) -> None: ...


def parse_manifest(text: str) -> list[str]:
    """
    Parses manifest text into a list of locations, preserving order.

    Raises:
        ManifestFetchError: If the text is JSON of an unsupported shape.
    """
    stripped = text.strip()
    if not stripped:
        return []

    if stripped[0] in "[{":
        try:
            data = json.loads(stripped)
        except json.JSONDecodeError as e:
            raise ManifestFetchError(f"Manifest is not valid JSON: {e}") from e

        if isinstance(data, dict):
            data = next((data[k] for k in _LIST_KEYS if k in data), None)
        if not isinstance(data, list) or not all(isinstance(i, str) for i in data):
            raise ManifestFetchError(
                "Manifest JSON must be a list of URLs or an object with a "
                "'files' list."
            )
        return [item.strip() for item in data if item.strip()]

    return [
        line.strip()
        for line in stripped.splitlines()
        if line.strip() and not line.strip().startswith("#")
    ]


class HttpManifestSource:
    """Fetches the manifest from an HTTP(S) endpoint."""

    def __init__(self, url: str, timeout: float = 30.0):
        self.url = url
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json, text/plain;q=0.9"},
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=15),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def fetch_locations(self) -> list[str]:
        await self._initialize_session()
        try:
            async with self._session.get(self.url) as r:
                if not 200 <= r.status < 300:
                    raise ManifestFetchError(
                        f"Manifest request to {self.url} returned HTTP {r.status}."
                    )
                text = await r.text()
        except asyncio.TimeoutError as e:
            raise ManifestFetchError(
                f"Manifest request to {self.url} timed out after {self.timeout}s."
            ) from e
        except aiohttp.ClientError as e:
            raise ManifestFetchError(
                f"Manifest request to {self.url} failed: {e}"
            ) from e
        except UnicodeDecodeError as e:
            raise ManifestFetchError(
                f"Manifest from {self.url} is not valid text: {e}"
            ) from e

        locations = parse_manifest(text)
        log.debug(f"Fetched {len(locations)} locations from {self.url}")
        return locations

    def __repr__(self) -> str:
        return f"HttpManifestSource({self.url!r})"


class FileManifestSource:
    """Reads the manifest from a local file, re-read on every fetch."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    async def close(self) -> None:
        return None

    async def fetch_locations(self) -> list[str]:
        try:
            async with aiofiles.open(self.path, encoding="utf-8") as f:
                text = await f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestFetchError(
                f"Could not read manifest file '{self.path}': {e}"
            ) from e
        return parse_manifest(text)

    def __repr__(self) -> str:
        return f"FileManifestSource({str(self.path)!r})"


def create_manifest_source(source: str, timeout: float = 30.0) -> ManifestSource:
    """Builds the manifest source for a configured URL or file path."""
    if source.lower().startswith(("http://", "https://")):
        return HttpManifestSource(source, timeout=timeout)
    return FileManifestSource(Path(source).expanduser())
