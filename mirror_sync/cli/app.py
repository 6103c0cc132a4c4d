"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import signal
from contextlib import suppress
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from mirror_sync import __version__
from mirror_sync.core import FileSynchronizer, SyncScheduler
from mirror_sync.exceptions import MirrorSyncError
from mirror_sync.models.config import SyncConfig
from mirror_sync.network.downloader import Downloader
from mirror_sync.network.manifest import create_manifest_source
from mirror_sync.storage.config_manager import ConfigManager
from mirror_sync.storage.local_directory import LocalDirectory
from mirror_sync.utils.structured_logger import (
    StructuredLogger,
    create_structured_logger,
)

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_cycle_summary,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="WARNING",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("mirror_sync")
log.setLevel("INFO")

app = typer.Typer(
    name="mirror-sync",
    help=(
        "Keeps a local directory mirroring a remote file manifest. Use "
        "'mirror-sync <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "mirror-sync"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _config_file(ctx: typer.Context) -> Path:
    return (ctx.obj or {}).get("config_file", CONFIG_FILE)


def _load_config(ctx: typer.Context, cli_options: dict | None = None) -> SyncConfig:
    overrides = {k: v for k, v in (cli_options or {}).items() if v is not None}
    return ConfigManager(_config_file(ctx)).load_config(overrides)


def build_synchronizer(
    config: SyncConfig,
) -> tuple[FileSynchronizer, StructuredLogger | None]:
    """Wires a FileSynchronizer and its collaborators from a validated config."""
    base_logger, events = None, None
    if config.json_log_dir:
        base_logger, events = create_structured_logger(
            Path(config.json_log_dir).expanduser()
        )

    directory = LocalDirectory(Path(config.destination_path).expanduser())
    downloader = Downloader(
        directory,
        timeout=config.download_timeout,
        max_connections=config.max_concurrent_downloads,
    )
    synchronizer = FileSynchronizer(
        directory.path,
        create_manifest_source(config.manifest_source, config.manifest_timeout),
        downloader=downloader,
        max_concurrent_downloads=config.max_concurrent_downloads,
        events=events,
    )
    return synchronizer, base_logger


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="Path to the configuration file."
    ),
):
    """Mirror Sync CLI"""
    if version:
        console.print(f"[bold]mirror-sync[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    ctx.obj = {"config_file": config_file or CONFIG_FILE}

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("mirror_sync").setLevel(log_level)

    if show_config:
        path = _config_file(ctx)
        if not path.is_file():
            console.print(
                "[red]✗ Config file not found.[/] Run [cyan]mirror-sync init[/cyan]"
                " first."
            )
            raise typer.Exit(code=1)
        config = _load_config(ctx)
        print_config(path, config.model_dump(exclude={"config_path"}))
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    ctx: typer.Context,
    manifest: str = typer.Argument(
        ..., help="URL or file path of the manifest listing the files to mirror."
    ),
    destination: str = typer.Option(
        "files", "--dest", "-d", help="Local directory to keep in sync."
    ),
    interval: int = typer.Option(
        300, "--interval", "-i", help="Seconds between synchronization cycles."
    ),
    workers: int = typer.Option(
        3, "--workers", "-w", help="Number of simultaneous downloads."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Create a configuration file."""
    path = _config_file(ctx)
    if (
        path.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    ConfigManager(path).save_new_config(
        {
            "manifest_source": manifest,
            "destination_path": destination,
            "interval_seconds": interval,
            "max_concurrent_downloads": workers,
        }
    )
    console.print(f"\n[bold green]✓ Configuration saved to '{path}'[/bold green]")
    console.print("Ready to sync! Try: [cyan]mirror-sync run[/cyan]")


@app.command(name="run")
def run_command(
    ctx: typer.Context,
    once: bool = typer.Option(
        False, "--once", help="Run a single cycle and exit."
    ),
    interval: int | None = typer.Option(
        None, "--interval", "-i", help="Seconds between cycles (overrides config)."
    ),
    workers: int | None = typer.Option(
        None, "--workers", "-w", help="Simultaneous downloads (overrides config)."
    ),
    destination: str | None = typer.Option(
        None, "--dest", "-d", help="Destination directory (overrides config)."
    ),
):
    """Run the synchronization daemon."""
    config = _load_config(
        ctx,
        {
            "interval_seconds": interval,
            "max_concurrent_downloads": workers,
            "destination_path": destination,
        },
    )

    async def _run_async():
        synchronizer, base_logger = build_synchronizer(config)
        scheduler = SyncScheduler(synchronizer, config.interval_seconds)
        loop = asyncio.get_running_loop()
        # not available on Windows or outside the main thread
        with suppress(NotImplementedError, RuntimeError):
            loop.add_signal_handler(signal.SIGTERM, scheduler.stop)
        log.info(
            f"[bold cyan]🔄 Mirroring {config.manifest_source} into "
            f"{config.destination_path} every {config.interval_seconds}s[/bold cyan]"
        )
        try:
            await scheduler.run(max_cycles=1 if once else None)
        finally:
            await synchronizer.close()
            if base_logger:
                base_logger.close()

    asyncio.run(_run_async())


@app.command()
def sync(ctx: typer.Context):
    """Run one synchronization cycle and print a summary."""
    config = _load_config(ctx)

    async def _sync_async():
        synchronizer, base_logger = build_synchronizer(config)
        try:
            return await synchronizer.run_cycle()
        finally:
            await synchronizer.close()
            if base_logger:
                base_logger.close()

    try:
        result = asyncio.run(_sync_async())
    except MirrorSyncError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e

    print_cycle_summary(result, console)
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def validate(ctx: typer.Context):
    """Validate the current configuration."""
    try:
        config = _load_config(ctx)
        print_validation_table(config)
    except MirrorSyncError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e
