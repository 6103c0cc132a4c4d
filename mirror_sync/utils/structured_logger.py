"""
Structured logging system for better log analysis and debugging.
Provides JSON-formatted logs with context and metadata.
"""

import json
import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any


class StructuredLogger:
    """
    Enhanced logger that outputs both human-readable and machine-parseable logs.

    Usage:
        logger = StructuredLogger("mirror_sync", log_dir=Path("logs"))
        logger.info("file_downloaded",
                    location="https://example.com/report.csv",
                    file_name="report.csv")
    """

    def __init__(
        self,
        name: str,
        log_dir: Path | None = None,
        enable_json: bool = True,
        enable_console: bool = False,
    ):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_dir: Directory for JSON log files (None = disabled)
            enable_json: Enable JSON file logging
            enable_console: Mirror events to the standard logger
        """
        self.name = name
        self.log_dir = log_dir
        self.enable_json = enable_json and log_dir is not None
        self.enable_console = enable_console

        self._logger = logging.getLogger(name)

        self._json_file = None
        self.json_log_path: Path | None = None
        if self.enable_json:
            log_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.json_log_path = log_dir / f"mirror_sync_{timestamp}.jsonl"
            self._json_file = open(self.json_log_path, "a", encoding="utf-8")  # noqa: SIM115

        # Session context (added to all log entries)
        self._session_context: dict[str, Any] = {
            "session_id": f"{int(time.time())}_{id(self)}",
            "start_time": datetime.now().isoformat(),
        }

    def set_session_context(self, **kwargs) -> None:
        """Set session-level context that appears in all logs."""
        self._session_context.update(kwargs)

    def _format_message(self, event: str, **context) -> str:
        """Format message for console output."""
        parts = [f"[{event}]"]
        for key, value in context.items():
            if key not in ("level", "timestamp"):
                parts.append(f"{key}={value}")
        return " ".join(parts)

    def _write_json(self, level: str, event: str, **context) -> None:
        """Write structured log entry to JSON file."""
        if not self._json_file or self._json_file.closed:
            return

        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "event": event,
            **self._session_context,
            **context,
        }

        try:
            self._json_file.write(json.dumps(entry, default=str) + "\n")
            self._json_file.flush()
        except (OSError, TypeError, ValueError) as e:
            # Fallback to stderr if JSON logging fails
            print(f"JSON logging failed: {e}", file=sys.stderr)

    def _emit(self, level: int, event: str, **context) -> None:
        if self.enable_console:
            self._logger.log(level, self._format_message(event, **context))
        if self.enable_json:
            self._write_json(logging.getLevelName(level), event, **context)

    def debug(self, event: str, **context) -> None:
        """Log debug event."""
        self._emit(logging.DEBUG, event, **context)

    def info(self, event: str, **context) -> None:
        """Log info event."""
        self._emit(logging.INFO, event, **context)

    def warning(self, event: str, **context) -> None:
        """Log warning event."""
        self._emit(logging.WARNING, event, **context)

    def error(self, event: str, **context) -> None:
        """Log error event."""
        self._emit(logging.ERROR, event, **context)

    def close(self) -> None:
        """Close JSON log file."""
        if self._json_file and not self._json_file.closed:
            self._json_file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class SyncEventLogger:
    """Specialized logger for reconciliation cycle events."""

    def __init__(self, logger: StructuredLogger):
        self.logger = logger

    def cycle_started(self, destination: str):
        """Log cycle started."""
        self.logger.info("cycle_started", destination=destination)

    def manifest_failed(self, error: str):
        """Log manifest fetch failure."""
        self.logger.error("manifest_fetch_failed", error=error)

    def file_downloaded(self, location: str, file_name: str):
        """Log a completed download."""
        self.logger.info("file_downloaded", location=location, file_name=file_name)

    def download_failed(self, location: str, error: str):
        """Log a failed download."""
        self.logger.error("download_failed", location=location, error=error)

    def file_removed(self, file_name: str):
        """Log removal of a stale file."""
        self.logger.info("file_removed", file_name=file_name)

    def cleanup_failed(self, file_name: str, error: str):
        """Log a stale file that could not be removed."""
        self.logger.warning("cleanup_failed", file_name=file_name, error=error)

    def cycle_completed(
        self,
        duration_s: float,
        downloaded: int,
        failed: int,
        removed: int,
        cleanup_failed: int,
    ):
        """Log cycle completed."""
        self.logger.info(
            "cycle_completed",
            duration_s=round(duration_s, 2),
            files_downloaded=downloaded,
            files_failed=failed,
            files_removed=removed,
            cleanup_failed=cleanup_failed,
        )


def create_structured_logger(
    log_dir: Path | None = None, enable_json: bool = True
) -> tuple[StructuredLogger, SyncEventLogger]:
    """
    Create the structured loggers.

    Returns:
        Tuple of (base_logger, sync_event_logger)
    """
    base = StructuredLogger(
        "mirror_sync.events", log_dir=log_dir, enable_json=enable_json
    )
    return base, SyncEventLogger(base)
