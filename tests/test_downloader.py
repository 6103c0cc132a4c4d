"""Tests for the single-file downloader"""

import pytest

from mirror_sync.exceptions import DownloadError
from mirror_sync.network.downloader import Downloader
from mirror_sync.storage.local_directory import LocalDirectory

from conftest import read_dir, write_files


@pytest.fixture
def downloader(destination, http_session):
    return Downloader(LocalDirectory(destination), session=http_session, timeout=5)


@pytest.mark.asyncio
async def test_download_writes_single_file(downloader, destination, file_server):
    url = file_server.add("file.txt", "content")

    file_name = await downloader.download(url)

    assert file_name == "file.txt"
    assert read_dir(destination) == {"file.txt": "content"}


@pytest.mark.asyncio
async def test_download_overwrites_existing_file(downloader, destination, file_server):
    write_files(destination, {"file.txt": "a much longer previous body"})
    url = file_server.add("file.txt", "new")

    await downloader.download(url)

    assert read_dir(destination) == {"file.txt": "new"}


@pytest.mark.asyncio
async def test_download_writes_binary_body(downloader, destination, file_server):
    body = bytes(range(256)) * 1024
    url = file_server.add("blob.bin", body)

    await downloader.download(url)

    assert (destination / "blob.bin").read_bytes() == body


@pytest.mark.asyncio
async def test_non_2xx_status_raises(downloader, destination, file_server):
    file_server.statuses["missing.txt"] = 404

    with pytest.raises(DownloadError) as exc_info:
        await downloader.download(file_server.url("missing.txt"))

    assert "404" in exc_info.value.reason
    assert exc_info.value.location == file_server.url("missing.txt")
    assert not (destination / "missing.txt").exists()


@pytest.mark.asyncio
async def test_timeout_raises_download_error(destination, http_session, file_server):
    file_server.delay = 1.0
    url = file_server.add("slow.txt", "eventually")
    downloader = Downloader(LocalDirectory(destination), session=http_session, timeout=0.2)

    with pytest.raises(DownloadError) as exc_info:
        await downloader.download(url)

    assert exc_info.value.reason == "timed out"


@pytest.mark.asyncio
async def test_connection_error_raises_download_error(downloader):
    with pytest.raises(DownloadError):
        await downloader.download("http://127.0.0.1:1/unreachable.txt")


@pytest.mark.asyncio
async def test_location_without_file_name_raises(downloader, file_server):
    with pytest.raises(DownloadError):
        await downloader.download(file_server.url(""))


@pytest.mark.asyncio
async def test_owned_session_is_created_and_closed(destination, file_server):
    downloader = Downloader(LocalDirectory(destination), timeout=5)
    url = file_server.add("own.txt", "owned")

    await downloader.download(url)
    session = downloader._session
    await downloader.close()

    assert session.closed
    assert read_dir(destination) == {"own.txt": "owned"}


@pytest.mark.asyncio
async def test_injected_session_is_left_open(downloader, http_session):
    await downloader.close()

    assert not http_session.closed


@pytest.mark.asyncio
async def test_local_write_failure_raises_download_error(
    downloader, destination, file_server
):
    (destination / "file.txt").mkdir(parents=True)
    url = file_server.add("file.txt", "content")

    with pytest.raises(DownloadError) as exc_info:
        await downloader.download(url)

    assert exc_info.value.reason.startswith("write failed")
    assert (destination / "file.txt").is_dir()


@pytest.mark.asyncio
async def test_unusable_destination_raises_download_error(
    temp_dir, http_session, file_server
):
    blocker = temp_dir / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    downloader = Downloader(
        LocalDirectory(blocker / "files"), session=http_session, timeout=5
    )
    url = file_server.add("file.txt", "content")

    with pytest.raises(DownloadError) as exc_info:
        await downloader.download(url)

    assert exc_info.value.reason.startswith("write failed")
