"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mirror_sync.models.config import SyncConfig
from mirror_sync.models.stats import CycleResult
from mirror_sync.utils.formatting import format_duration


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `mirror-sync init <MANIFEST>` to create a fresh one.",
        ],
        "ManifestFetchError": [
            "• Verify the manifest URL or file path in the configuration.",
            "• Check your internet connection.",
            "• The catalog service might be temporarily unavailable.",
        ],
        "DirectoryAccessError": [
            "• Make sure the destination path is a directory you can write to.",
            "• Check that no regular file occupies the destination path.",
        ],
        "DownloadBatchError": [
            "• Some files could not be downloaded; they will be retried next cycle.",
            "• Run the command with -vv for detailed logs.",
        ],
        "ClientResponseError": [
            "• A network connection issue occurred.",
            "• Please try again in a few minutes.",
        ],
        "TimeoutError": [
            "• A request timed out, which may indicate network throttling.",
            "• Try increasing `download_timeout` or reducing `--workers`.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        content += f"{key} = {escape(str(value))}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{escape(str(config_path))}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: SyncConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    table.add_row("Manifest:", f"[green]{escape(config.manifest_source)}[/green]")
    table.add_row("Destination:", escape(config.destination_path))
    table.add_row("Interval:", format_duration(config.interval_seconds))
    table.add_row("Max Concurrent:", str(config.max_concurrent_downloads))
    table.add_row("Download Timeout:", f"{config.download_timeout:g}s")
    table.add_row(
        "JSON Event Log:",
        escape(config.json_log_dir) if config.json_log_dir else "✗ Disabled",
    )

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_cycle_summary(result: CycleResult, console: Console | None = None):
    """Displays the outcome of a single synchronization cycle."""
    console = console or Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=16)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "✓ Downloaded:", f"[bold green]{len(result.downloaded)}[/bold green]"
    )
    stats_table.add_row("✗ Removed:", f"[yellow]{len(result.removed)}[/yellow]")

    if result.failed:
        stats_table.add_row(
            "✗ Failed:", f"[bold red]{len(result.failed)}[/bold red]"
        )
        for location, reason in result.failed.items():
            stats_table.add_row(
                "", f"[red]{escape(location)}[/red] [dim]{escape(reason)}[/dim]"
            )

    if result.cleanup_failed:
        stats_table.add_row(
            "⚠ Not Removed:",
            f"[bold yellow]{len(result.cleanup_failed)}[/bold yellow]",
        )
        for file_name, reason in result.cleanup_failed.items():
            stats_table.add_row("", f"{escape(file_name)} [dim]{escape(reason)}[/dim]")

    stats_table.add_row("", "")  # Spacer
    stats_table.add_row(
        "Time Elapsed:", f"[blue]{format_duration(result.duration_s)}[/blue]"
    )

    if result.success:
        title = "🔄 [bold]Sync Complete![/bold]"
        border_color = "green"
    else:
        title = "⚠ [bold]Sync Finished With Errors[/bold]"
        border_color = "yellow"

    console.print()
    console.print(
        Panel(
            stats_table,
            title=title,
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
