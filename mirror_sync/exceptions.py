"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class MirrorSyncError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(MirrorSyncError):
    """Raised for issues related to configuration loading or validation."""


class ManifestFetchError(MirrorSyncError):
    """Raised when the remote manifest cannot be fetched or parsed."""


class InvalidLocationError(MirrorSyncError):
    """Raised when no usable file name can be derived from a remote location."""


class DirectoryAccessError(MirrorSyncError):
    """Raised when the destination directory cannot be created or read."""


class CleanupError(MirrorSyncError):
    """Raised when a stale file cannot be removed from the destination."""

    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Could not remove '{file_name}': {reason}")
        self.file_name = file_name
        self.reason = reason


class DownloadError(MirrorSyncError):
    """Raised when a single remote file cannot be fetched or written locally."""

    def __init__(self, location: str, reason: str):
        super().__init__(f"Failed to download '{location}': {reason}")
        self.location = location
        self.reason = reason


class DownloadBatchError(DownloadError):
    """
    Raised once a whole batch of downloads has finished and at least one failed.

    Carries every per-location failure along with the names that were written
    successfully, so callers can report on the batch as a whole.
    """

    def __init__(self, errors: dict[str, Exception], succeeded: list[str]):
        self.errors = errors
        self.succeeded = succeeded
        MirrorSyncError.__init__(
            self,
            f"{len(errors)} of {len(errors) + len(succeeded)} downloads failed: "
            + ", ".join(errors),
        )
        self.location = ", ".join(errors)
        self.reason = "; ".join(str(e) for e in errors.values())
