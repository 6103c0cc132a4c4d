"""Tests for the managed destination directory"""

import pytest

from mirror_sync.exceptions import CleanupError, DirectoryAccessError
from mirror_sync.storage.local_directory import LocalDirectory

from conftest import write_files


class TestListFiles:
    def test_missing_directory_is_created_and_empty(self, destination):
        directory = LocalDirectory(destination)

        assert directory.list_files() == set()
        assert destination.is_dir()
        assert directory.list_files() == set()

    def test_returns_exact_file_names(self, destination):
        write_files(destination, {"a": "1", "b": "2", "c": "3"})

        assert LocalDirectory(destination).list_files() == {"a", "b", "c"}

    def test_subdirectories_are_ignored(self, destination):
        write_files(destination, {"a.txt": "1"})
        (destination / "nested").mkdir()
        (destination / "nested" / "inner.txt").write_text("x")

        assert LocalDirectory(destination).list_files() == {"a.txt"}


class TestEnsureExists:
    def test_reports_creation_only_once(self, destination):
        directory = LocalDirectory(destination)

        assert directory.ensure_exists() is True
        assert directory.ensure_exists() is False

    def test_file_in_the_way_raises(self, temp_dir):
        blocker = temp_dir / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(DirectoryAccessError):
            LocalDirectory(blocker).ensure_exists()

        with pytest.raises(DirectoryAccessError):
            LocalDirectory(blocker).list_files()


class TestDelete:
    def test_removes_named_file(self, destination):
        write_files(destination, {"old.txt": "x", "keep.txt": "y"})
        directory = LocalDirectory(destination)

        directory.delete("old.txt")

        assert directory.list_files() == {"keep.txt"}

    def test_missing_file_raises_cleanup_error(self, destination):
        directory = LocalDirectory(destination)
        directory.ensure_exists()

        with pytest.raises(CleanupError) as exc_info:
            directory.delete("ghost.txt")

        assert exc_info.value.file_name == "ghost.txt"
