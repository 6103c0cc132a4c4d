"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DESTINATION_PATH = "files"
DEFAULT_INTERVAL_SECONDS = 5 * 60
DEFAULT_MAX_CONCURRENT_DOWNLOADS = 3


class SyncConfig(BaseModel):
    """A validated configuration model for the synchronization daemon."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Source and destination
    manifest_source: str
    destination_path: str = DEFAULT_DESTINATION_PATH

    # Scheduling and transfer settings
    interval_seconds: int = DEFAULT_INTERVAL_SECONDS
    max_concurrent_downloads: int = DEFAULT_MAX_CONCURRENT_DOWNLOADS
    download_timeout: float = 300.0
    manifest_timeout: float = 30.0

    # Logging
    json_log_dir: str = ""

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("manifest_source")
    @classmethod
    def validate_manifest_source(cls, v: str) -> str:
        if not v:
            raise ValueError(
                "Manifest source cannot be empty. Provide a URL or a file path."
            )
        return v

    @field_validator("destination_path")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if not v:
            raise ValueError("Destination path cannot be empty.")
        return v

    @field_validator("interval_seconds")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        """Ensures the polling interval is between one second and one day."""
        if v < 1 or v > 86400:
            raise ValueError("Interval must be between 1 and 86400 seconds.")
        return v

    @field_validator("max_concurrent_downloads")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of concurrent downloads."""
        if v < 1 or v > 32:
            raise ValueError("Max concurrent downloads must be between 1 and 32.")
        return v

    @field_validator("download_timeout", "manifest_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
