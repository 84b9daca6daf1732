"""Shared console helpers for libforge.

Rich-based output used by the CLI: phase headers, key/value summary tables,
a planned-files table and coloured status lines.  The engine itself never
prints; it only logs.
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.rule import Rule
from rich.table import Table

console = Console()


def format_size(num_bytes: int) -> str:
    """Format a byte count for display.

    Examples::

        format_size(512)    -> "512 B"
        format_size(2048)   -> "2.0 KB"
    """
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes / (1024 * 1024):.1f} MB"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


PHASE_COLORS: dict[str, str] = {
    "infrastructure": "bright_cyan",
    "domain": "bright_green",
    "submodule": "bright_yellow",
    "contract": "bright_green",
    "data-access": "bright_blue",
    "feature": "bright_magenta",
    "infra": "bright_cyan",
}


def print_phase_header(phase: str, detail: str = "") -> None:
    """Print a full-width rule naming a generation phase."""
    color = PHASE_COLORS.get(phase, "white")
    label = f"{phase.upper()}: {detail}" if detail else phase.upper()
    console.print()
    console.print(Rule(f"[bold {color}] {label} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_files_table(rows: Iterable[tuple[str, str, int]], title: str = "Files") -> None:
    """Print ``(phase, path, size)`` rows as a table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Phase", style="dim", no_wrap=True)
    table.add_column("Path")
    table.add_column("Size", justify="right")

    for phase, path, size in rows:
        color = PHASE_COLORS.get(phase, "white")
        table.add_row(f"[{color}]{phase}[/{color}]", path, format_size(size))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
