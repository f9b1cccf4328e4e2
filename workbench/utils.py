"""Shared console helpers for Workbench.

All user-facing output goes through the module-level Rich ``console`` so tests
can capture it and the CLI can toggle verbose diagnostics in one place.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable
from typing import TypeVar

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

console = Console()

T = TypeVar("T")

_verbose = False


# ---------------------------------------------------------------------------
# Verbosity
# ---------------------------------------------------------------------------


def set_verbose(enabled: bool) -> None:
    """Enable or disable :func:`print_debug` output."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    return _verbose


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_info(message: str) -> None:
    console.print(message)


def print_debug(message: str) -> None:
    """Print a dimmed diagnostic line when verbose mode is on."""
    if _verbose:
        console.print(f"[dim]{escape(message)}[/dim]")


def print_feature_table(rows: list[tuple[str, str, bool]], title: str) -> None:
    """Print ``(name, description, installed)`` rows as a table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Feature", style="bold", no_wrap=True)
    table.add_column("Description")
    table.add_column("Installed", justify="center")

    for name, description, installed in rows:
        table.add_row(name, description, "[green]yes[/green]" if installed else "")

    console.print(table)


def create_progress() -> Progress:
    """Create a Rich progress display with a spinner for blocking tasks."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def run_with_spinner(message: str, fn: Callable[[], T]) -> T:
    """Run a blocking callable while a spinner animates *message*.

    When stdout is not a terminal the callable runs without any animation.
    The outcome is echoed as a success or error line either way.
    """
    if not sys.stdout.isatty():
        try:
            result = fn()
        except Exception:
            print_error(f"x {message}")
            raise
        print_debug(f"done: {message}")
        return result

    with create_progress() as progress:
        progress.add_task(message, total=None)
        try:
            result = fn()
        except Exception:
            progress.stop()
            print_error(f"x {message}")
            raise
    print_success(f"ok {message}")
    return result


# ---------------------------------------------------------------------------
# String helpers
# ---------------------------------------------------------------------------


def sanitize_name(name: str) -> str:
    """Convert an arbitrary project name to a safe package/directory name.

    Examples::

        sanitize_name("My Site") -> "my-site"
        sanitize_name("  API (v2)  ") -> "api-v2"
    """
    result = re.sub(r"[^a-zA-Z0-9_-]", "-", name.strip().lower())
    result = re.sub(r"-+", "-", result)
    return result.strip("-")
