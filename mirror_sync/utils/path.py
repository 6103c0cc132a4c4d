"""
Utilities for handling file paths and deriving local names from remote locations.
"""

from pathlib import Path
from urllib.parse import unquote, urlsplit

from pathvalidate import ValidationError, validate_filename

from mirror_sync.exceptions import InvalidLocationError


def file_name_from_location(location: str) -> str:
    """
    Derives the local file name for a remote location from its last path segment.

    The segment is percent-decoded, so ``http://host/a/my%20file.txt`` maps to
    ``my file.txt``. Query strings and fragments are ignored.

    Raises:
        InvalidLocationError: If the path has no final segment or the segment
        is not a usable file name.
    """
    path = unquote(urlsplit(location).path)
    name = path.rsplit("/", 1)[-1]
    if not name or name in (".", ".."):
        raise InvalidLocationError(
            f"Cannot derive a file name from location '{location}'."
        )
    try:
        validate_filename(name, platform="auto")
    except ValidationError as e:
        raise InvalidLocationError(
            f"Location '{location}' maps to an unusable file name '{name}': {e}"
        ) from e
    return name


def create_dir(directory_path: Path) -> bool:
    """
    Creates a directory if it does not already exist.

    Returns:
        True when the directory had to be created.
    """
    if directory_path.is_dir():
        return False
    directory_path.mkdir(parents=True, exist_ok=True)
    return True
