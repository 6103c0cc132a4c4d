"""
The on-disk set of managed files. Every filesystem mutation of the destination
directory goes through this class.
"""

import logging
from pathlib import Path

from mirror_sync.exceptions import CleanupError, DirectoryAccessError
from mirror_sync.utils.path import create_dir

log = logging.getLogger(__name__)


class LocalDirectory:
    """
    A flat directory of plain files, re-scanned on every query.

    Nothing is cached in memory; the directory itself is the source of truth.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def ensure_exists(self) -> bool:
        """
        Creates the directory if it is absent.

        Returns:
            True when the directory had to be created, False if it already existed.

        Raises:
            DirectoryAccessError: If the path cannot be created (permissions, or a
            non-directory already occupies it).
        """
        try:
            return create_dir(self.path)
        except OSError as e:
            raise DirectoryAccessError(
                f"Cannot create destination directory '{self.path}': {e}"
            ) from e

    def list_files(self) -> set[str]:
        """
        Returns the names of the regular files directly inside the directory.

        A missing directory is created and reported as empty. Subdirectories are
        not traversed.
        """
        if self.ensure_exists():
            return set()
        try:
            return {entry.name for entry in self.path.iterdir() if entry.is_file()}
        except OSError as e:
            raise DirectoryAccessError(
                f"Cannot read destination directory '{self.path}': {e}"
            ) from e

    def path_for(self, file_name: str) -> Path:
        return self.path / file_name

    def delete(self, file_name: str) -> None:
        """
        Removes a managed file.

        Raises:
            CleanupError: If the file cannot be removed.
        """
        try:
            self.path_for(file_name).unlink()
        except OSError as e:
            raise CleanupError(file_name, e.strerror or str(e)) from e
        log.debug(f"Deleted '{file_name}' from {self.path}")
