"""Test configuration and fixtures"""

import asyncio
import tempfile
from pathlib import Path

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from mirror_sync.core.synchronizer import FileSynchronizer
from mirror_sync.exceptions import ManifestFetchError
from mirror_sync.network.downloader import Downloader
from mirror_sync.storage.local_directory import LocalDirectory


class FileServer:
    """A local HTTP server serving in-memory files and counting concurrent requests."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.statuses: dict[str, int] = {}
        self.delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self.requests: list[str] = []
        app = web.Application()
        app.router.add_get("/{name:.*}", self._handle)
        self._server = TestServer(app)

    async def _handle(self, request: web.Request) -> web.Response:
        name = request.match_info["name"]
        self.requests.append(name)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if name in self.statuses:
                return web.Response(status=self.statuses[name], text="error")
            if name not in self.files:
                return web.Response(status=404, text="not found")
            return web.Response(body=self.files[name])
        finally:
            self.in_flight -= 1

    def add(self, name: str, content: bytes | str) -> str:
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.files[name] = content
        return self.url(name)

    def url(self, name: str) -> str:
        return str(self._server.make_url(f"/{name}"))

    async def start(self) -> None:
        await self._server.start_server()

    async def close(self) -> None:
        await self._server.close()


class StaticManifestSource:
    """Manifest source returning a fixed, mutable list of locations."""

    def __init__(self, locations: list[str] | None = None):
        self.locations = list(locations or [])
        self.fail_next = 0
        self.calls = 0

    async def fetch_locations(self) -> list[str]:
        self.calls += 1
        if self.fail_next:
            self.fail_next -= 1
            raise ManifestFetchError("catalog unavailable")
        return list(self.locations)

    async def close(self) -> None:
        return None


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def destination(temp_dir):
    """A destination path that does not exist yet"""
    return temp_dir / "files"


@pytest_asyncio.fixture
async def file_server():
    """Local HTTP server serving test files"""
    server = FileServer()
    await server.start()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def http_session():
    """Client session without a per-host connection cap"""
    async with aiohttp.ClientSession() as session:
        yield session


@pytest.fixture
def manifest():
    return StaticManifestSource()


@pytest.fixture
def make_synchronizer(destination, manifest, http_session):
    """Build a FileSynchronizer wired to the test session and manifest"""

    def _make(max_concurrent_downloads: int = 3, **kwargs) -> FileSynchronizer:
        downloader = Downloader(
            LocalDirectory(destination), session=http_session, timeout=10
        )
        return FileSynchronizer(
            destination,
            manifest,
            downloader=downloader,
            max_concurrent_downloads=max_concurrent_downloads,
            **kwargs,
        )

    return _make


def write_files(directory: Path, names: dict[str, str]) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    for name, content in names.items():
        (directory / name).write_text(content, encoding="utf-8")


def read_dir(directory: Path) -> dict[str, str]:
    return {
        p.name: p.read_text(encoding="utf-8") for p in directory.iterdir() if p.is_file()
    }
