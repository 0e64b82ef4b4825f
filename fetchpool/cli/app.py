"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

import typer
from aiohttp import web
from rich.console import Console
from rich.logging import RichHandler

from fetchpool import __version__
from fetchpool.core import JobManager
from fetchpool.exceptions import FetchPoolError
from fetchpool.models.config import FetchConfig
from fetchpool.storage.config_manager import ConfigManager
from fetchpool.web import create_app

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_results_table,
    print_summary_panel,
)
from .progress_manager import JobProgressManager

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("fetchpool")

app = typer.Typer(
    name="fetchpool",
    help=(
        "Fetch batches of URLs to disk with a bounded pool of concurrent workers."
        " Use 'fetchpool <command> --help' for more info."
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
    return base_dir.expanduser() / "fetchpool"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


def _load_config(cli_options: dict | None = None) -> FetchConfig:
    try:
        return ConfigManager(CONFIG_FILE).load_config(cli_options)
    except FetchPoolError as e:
        console.print(format_error_with_suggestions(e))
        raise typer.Exit(code=1) from e


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
):
    """fetchpool CLI"""
    if version:
        console.print(f"[bold]fetchpool[/bold] version [cyan]{__version__}[/cyan]")
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("fetchpool").setLevel(log_level)

    if show_config:
        config_manager = ConfigManager(CONFIG_FILE)
        print_config(CONFIG_FILE, config_manager.get_config_as_dict())
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration file."
    ),
):
    """Write a configuration file populated with the default settings."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    try:
        ConfigManager(CONFIG_FILE).save_new_config()
    except FetchPoolError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")


def _read_urls_from_stdin() -> str:
    """Reads newline-separated URLs from stdin."""
    if sys.stdin.isatty():
        console.print(
            "[yellow]⚠️  No input detected on stdin. Please pipe URLs or redirect"
            " a file.[/yellow]"
        )
        console.print(
            "[dim]Examples:[/dim]\n"
            "  [cyan]cat urls.txt | fetchpool fetch --stdin[/cyan]\n"
            "  [cyan]fetchpool fetch --stdin < urls.txt[/cyan]"
        )
        raise typer.Exit(code=1)

    console.print("[dim]Reading URLs from stdin...[/dim]")
    try:
        return sys.stdin.read()
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠️  Input interrupted.[/yellow]")
        raise typer.Exit(code=1) from None


@app.command(name="fetch")
def fetch_command(
    urls: list[str] | None = typer.Argument(  # noqa: B008
        None, help="One or more URLs to fetch."
    ),
    input_file: Path | None = typer.Option(  # noqa: B008
        None,
        "-i",
        "--input",
        help="Read URLs from a file, one per line.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
    stdin: bool = typer.Option(
        False, "--stdin", help="Read URLs from standard input, one URL per line."
    ),
    workers: int | None = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of simultaneous fetches (default 5, overrides the config).",
    ),
    download_dir: str | None = typer.Option(
        None, "-d", "--dir", help="Directory the fetched files are written to."
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", help="Total time limit per fetch, in seconds."
    ),
    connect_timeout: float | None = typer.Option(
        None,
        "--connect-timeout",
        help="Connection time limit per fetch, in seconds.",
    ),
):
    """Fetch a batch of URLs and follow its progress until it completes."""
    sources: list[str] = list(urls or [])
    if input_file:
        try:
            sources.append(input_file.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            console.print(f"[red]✗ Could not read file {input_file}: {e}[/red]")
            raise typer.Exit(code=1) from e
    if stdin:
        sources.append(_read_urls_from_stdin())
    if not sources:
        console.print(
            "[red]✗ No URLs provided.[/red] "
            "Use: [cyan]fetchpool fetch <URL>[/cyan], [cyan]--input[/cyan] "
            "or [cyan]--stdin[/cyan]"
        )
        raise typer.Exit(code=1)

    if timeout is not None and connect_timeout is None:
        # Keep the connect phase inside a shortened total budget
        connect_timeout = min(
            timeout, FetchConfig.model_fields["connect_timeout"].default
        )

    config = _load_config(
        {
            "max_workers": workers,
            "download_dir": download_dir,
            "total_timeout": timeout,
            "connect_timeout": connect_timeout,
        }
    )

    async def _fetch_async():
        async with JobManager(config) as manager:
            job_id = manager.submit("\n".join(sources))
            async with JobProgressManager(
                console, config.poll_interval
            ) as progress_manager:
                snapshot = await progress_manager.follow(manager, job_id)
            job = manager.registry.get_state(job_id)
            return snapshot, manager.stats, job.elapsed

    snapshot, stats, duration = asyncio.run(_fetch_async())

    print_results_table(snapshot)
    print_summary_panel(snapshot, stats, duration)
    if snapshot.failed:
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Interface to bind."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on."),
    workers: int | None = typer.Option(
        None, "-w", "--workers", help="Number of simultaneous fetches."
    ),
    download_dir: str | None = typer.Option(
        None, "-d", "--dir", help="Directory the fetched files are written to."
    ),
):
    """Serve the submit and poll endpoints over HTTP."""
    config = _load_config(
        {
            "host": host,
            "port": port,
            "max_workers": workers,
            "download_dir": download_dir,
        }
    )
    console.print(
        f"[bold cyan]Serving on http://{config.host}:{config.port}[/bold cyan] "
        f"[dim]({config.max_workers} workers, saving to '{config.download_dir}')[/dim]"
    )
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)
