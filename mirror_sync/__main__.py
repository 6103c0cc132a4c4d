"""
Console entry point. Turns errors escaping the CLI into a rendered panel and a
process exit status a service manager can act on.
"""

import logging
import sys

from rich.console import Console

from mirror_sync.cli.app import app
from mirror_sync.cli.formatters import format_error_with_suggestions
from mirror_sync.exceptions import (
    ConfigurationError,
    DirectoryAccessError,
    MirrorSyncError,
)

EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_DIRECTORY = 3

log = logging.getLogger("mirror_sync")


def exit_code_for(error: BaseException) -> int:
    """Maps an error that ended the process to its exit status."""
    if isinstance(error, ConfigurationError):
        return EXIT_CONFIG
    if isinstance(error, DirectoryAccessError):
        return EXIT_DIRECTORY
    return EXIT_FAILURE


def main() -> None:
    console = Console(stderr=True)
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Synchronization stopped by user.[/yellow]")
        sys.exit(0)
    except MirrorSyncError as e:
        console.print(format_error_with_suggestions(e))
        sys.exit(exit_code_for(e))
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        sys.exit(exit_code_for(e))


if __name__ == "__main__":
    main()
