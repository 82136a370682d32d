"""Rich console utilities for styled terminal output.

This module provides a consistent interface for all CLI output using the
Rich library, including the final reconciliation report.
"""

from collections.abc import Generator, Iterable
from contextlib import contextmanager

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from kubevault_auto.models import OutcomeState, WorkloadOutcome

_THEME = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "cyan bold",
        "muted": "dim",
    }
)

_STATE_STYLES = {
    OutcomeState.BOUND: "success",
    OutcomeState.COMPOSE_FAILED: "error",
    OutcomeState.BIND_FAILED: "error",
}

# Shared console instance
console = Console(theme=_THEME)


def info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[error]✗[/error] {message}")


def action(message: str) -> None:
    """Print an action/progress message."""
    console.print(f"[info]→[/info] {message}")


def step(message: str) -> None:
    """Print a sub-step message."""
    console.print(f"[muted]•[/muted] {message}")


def highlight(text: str) -> str:
    """Return text wrapped in highlight markup.

    Args:
        text: The text to highlight.

    Returns:
        Text wrapped in Rich markup for highlighting.

    """
    return f"[highlight]{text}[/highlight]"


@contextmanager
def spinner(message: str) -> Generator[None, None, None]:
    """Display a spinner while performing an operation.

    Args:
        message: The status message to display.

    Yields:
        None

    """
    with console.status(f"[info]{message}[/info]", spinner="dots"):
        yield


def create_task_progress() -> Progress:
    """Create a progress bar configured for per-workload processing.

    Returns:
        A configured Progress instance for batch operations.

    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TextColumn("[muted]{task.completed}/{task.total}[/muted]"),
        console=console,
    )


def summary_panel(title: str, items: dict[str, str]) -> None:
    """Print a summary panel with key-value pairs.

    Args:
        title: Title for the panel.
        items: Dictionary of label -> value pairs to display.

    """
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(style="cyan")

    for label, value in items.items():
        table.add_row(f"{label}:", value)

    console.print(Panel(table, title=f"[bold]{title}[/bold]", border_style="green"))


def report_table(outcomes: Iterable[WorkloadOutcome]) -> None:
    """Print one row per workload with its role path or failure reason.

    Args:
        outcomes: Outcomes returned by a reconciliation pass.

    """
    table = Table(title="Reconciliation report", header_style="bold")
    table.add_column("Workload")
    table.add_column("Service account", style="muted")
    table.add_column("State")
    table.add_column("Role path / reason")

    for outcome in outcomes:
        style = _STATE_STYLES.get(outcome.state, "warning")
        table.add_row(
            Text(outcome.descriptor.identity),
            Text(outcome.descriptor.account_name),
            f"[{style}]{outcome.state.value}[/{style}]",
            Text(outcome.role_path if outcome.ok else outcome.reason),
        )

    console.print(table)


def newline() -> None:
    """Print an empty line."""
    console.print()
