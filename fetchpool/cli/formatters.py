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

from fetchpool.models.job import JobSnapshot
from fetchpool.models.stats import PoolStats
from fetchpool.utils.formatting import format_duration, format_size, shorten_url


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "ConfigurationError": [
            "• Check the values in your configuration file.",
            "• Run `fetchpool --show-config` to see the effective settings.",
            "• Run `fetchpool init --force` to restore the defaults.",
        ],
        "PoolClosedError": [
            "• The worker pool was shutting down when the job was submitted.",
            "• Start a new session and submit the URLs again.",
        ],
        "ClientConnectorError": [
            "• A network connection issue occurred.",
            "• Check that the remote host is reachable.",
        ],
        "TimeoutError": [
            "• A fetch timed out, which may indicate a slow remote host.",
            "• Raise `--timeout` or reduce the number of `--workers`.",
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


def print_results_table(snapshot: JobSnapshot) -> None:
    """Prints the per-URL outcomes of a job."""
    console = Console()
    if not snapshot.results:
        console.print("[dim]No URLs were processed.[/dim]")
        return

    table = Table(
        title=f"Job {snapshot.job_id}",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("", width=1)
    table.add_column("URL", style="dim", overflow="fold")
    table.add_column("Outcome")

    for url, message in snapshot.results.items():
        ok = message.startswith("Saved")
        table.add_row(
            "[green]✓[/green]" if ok else "[red]✗[/red]",
            escape(shorten_url(url)),
            Text(message, style="green" if ok else "red"),
        )
    console.print(table)


def print_summary_panel(
    snapshot: JobSnapshot, stats: PoolStats, duration: float
) -> None:
    """Prints a detailed summary panel at the end of a fetch session."""
    console = Console()
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold", justify="right")
    table.add_column()

    table.add_row("[green]Succeeded[/green]", str(snapshot.success))
    if snapshot.failed:
        table.add_row("[red]Failed[/red]", str(snapshot.failed))
    distinct = len(snapshot.results)
    if distinct != snapshot.total:
        table.add_row(
            "[yellow]Duplicate URLs[/yellow]", str(snapshot.total - distinct)
        )
    table.add_row("", "")
    table.add_row("Total Size", format_size(stats.bytes_downloaded))
    table.add_row("Duration", format_duration(duration))
    if duration > 0 and stats.bytes_downloaded:
        table.add_row(
            "Avg Speed", f"{format_size(int(stats.bytes_downloaded / duration))}/s"
        )
    table.add_row("Peak Concurrency", str(stats.peak_in_flight))

    border = "green" if not snapshot.failed else "yellow"
    console.print(
        Panel(
            table,
            title="[bold]Fetch Summary[/bold]",
            border_style=border,
            expand=False,
        )
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the effective configuration."""
    console = Console()
    content = ""
    for key, value in sorted(config_data.items()):
        content += f"{key} = {escape(str(value))}\n"

    source = config_path if config_path.is_file() else "built-in defaults"
    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{escape(str(source))}[/dim])",
            border_style="cyan",
        )
    )
