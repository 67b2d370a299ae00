"""
UI utilities for consistent CLI output.

Provides icons, styling helpers, and output functions for the ideport CLI.
"""

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ideport.models import InstallReport

# Shared console instance
console = Console(soft_wrap=True, legacy_windows=False)


class Icons:
    """Unicode symbols for CLI output."""
    # Status
    SUCCESS = "✓"
    ERROR = "✗"
    WARNING = "!"
    SKIP = "○"

    # Structure
    ARROW = "→"
    BULLET = "•"
    INDENT = "  "


def success(message: str, prefix: bool = True) -> None:
    """Print a success message."""
    icon = f"[green]{Icons.SUCCESS}[/green] " if prefix else ""
    console.print(f"{icon}[green]{message}[/green]")


def error(message: str, prefix: bool = True) -> None:
    """Print an error message."""
    icon = f"[red]{Icons.ERROR}[/red] " if prefix else ""
    console.print(f"{icon}[red]{message}[/red]")


def warning(message: str, prefix: bool = True) -> None:
    """Print a warning message."""
    icon = f"[yellow]{Icons.WARNING}[/yellow] " if prefix else ""
    console.print(f"{icon}[yellow]{message}[/yellow]")


def header(title: str) -> None:
    """Print a section header."""
    console.print(f"\n[bold]{title}[/bold]")


def target_name(name: str, ok: bool = True) -> str:
    color = "cyan" if ok else "red"
    return f"[{color}]{name}[/{color}]"


def path(p: str) -> str:
    """Format a file path."""
    return f"[dim]{p}[/dim]"


def item(text: str, indent: int = 1) -> None:
    """Print a list item with bullet."""
    prefix = Icons.INDENT * indent
    console.print(f"{prefix}{Icons.BULLET} {text}")


def item_result(name: str, ok: bool, indent: int = 1, note: str = None) -> None:
    """Print an item with success/failure indicator."""
    prefix = Icons.INDENT * indent
    icon = f"[green]{Icons.SUCCESS}[/green]" if ok else f"[red]{Icons.ERROR}[/red]"
    color = "green" if ok else "red"
    msg = f"{prefix}{icon} [{color}]{name}[/{color}]"
    if note:
        msg += f" [dim]({note})[/dim]"
    console.print(msg)


def kv(key: str, value: str, indent: int = 1) -> None:
    """Print a key-value pair."""
    prefix = Icons.INDENT * indent
    console.print(f"{prefix}[dim]{key}:[/dim] {value}")


def blank() -> None:
    console.print()


def hint(message: str) -> None:
    """Print a helpful hint."""
    console.print(f"[dim]{Icons.ARROW} {message}[/dim]")


def report(result: InstallReport, verbose: bool = False) -> None:
    """Print the outcome of one target's install."""
    counts = [
        f"{count} {kind}" + ("" if count == 1 else "s")
        for kind, count in (("command", result.commands), ("agent", result.agents), ("skill", result.skills))
        if count
    ]
    note = escape(result.error or "") if not result.success else (", ".join(counts) or "nothing to install")
    item_result(result.target, result.success, note=note)

    if verbose or not result.success:
        for message in result.warnings:
            console.print(f"{Icons.INDENT * 2}[yellow]{Icons.WARNING}[/yellow] [dim]{escape(message)}[/dim]")
    elif result.warnings:
        console.print(f"{Icons.INDENT * 2}[dim]{len(result.warnings)} warnings (use -v to show)[/dim]")


def capability_table(title: str, rows: list[tuple[str, list]], columns: list[str]) -> Table:
    """Build a table of capability values, one column per profile."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Capability")
    for column in columns:
        table.add_column(column, justify="center")
    for name, values in rows:
        table.add_row(name, *(_cell(value) for value in values))
    return table


def _cell(value) -> str:
    if value is True:
        return f"[green]{Icons.SUCCESS}[/green]"
    if value is False:
        return f"[red]{Icons.ERROR}[/red]"
    if value is None:
        return f"[dim]{Icons.SKIP}[/dim]"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)
