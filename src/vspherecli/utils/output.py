"""Output formatting utilities using Rich."""

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def print_error(msg: str) -> None:
    """Print an error message to standard error.

    Args:
        msg: The error message to display.
    """
    err_console.print(f"[bold red]Error:[/bold red] {escape(msg)}")


def print_success(msg: str) -> None:
    """Print a success message to the console.

    Args:
        msg: The success message to display.
    """
    console.print(f"[bold green]✓[/bold green] {msg}")


def print_warning(msg: str) -> None:
    """Print a warning message to standard error.

    Args:
        msg: The warning message to display.
    """
    err_console.print(f"[bold yellow]Warning:[/bold yellow] {escape(msg)}")


def print_info(msg: str) -> None:
    """Print an info message to the console.

    Args:
        msg: The info message to display.
    """
    console.print(f"[cyan]{msg}[/cyan]")


def print_cancelled(msg: str = "Cancelled") -> None:
    """Print a cancellation message to the console.

    Args:
        msg: The cancellation message to display.
    """
    console.print(f"[yellow]{msg}[/yellow]")


def print_json(data: Any) -> None:
    """Print data as highlighted JSON.

    Args:
        data: JSON-serializable data.
    """
    console.print_json(data=data)


def create_table(
    title: str | None = None,
    columns: list[tuple[str, str]] | None = None,
    rows: list[list[str]] | None = None,
    show_header: bool = True,
) -> Table:
    """Create a Rich table.

    Args:
        title: Optional table title.
        columns: List of (column_name, column_style) tuples.
        rows: List of row data.
        show_header: Whether to show the header row.

    Returns:
        A configured Rich Table instance.
    """
    table = Table(title=title, show_header=show_header, header_style="bold cyan")

    if columns:
        for col_name, col_style in columns:
            table.add_column(col_name, style=col_style)

    if rows:
        for row in rows:
            table.add_row(*row)

    return table


def confirm(message: str, default: bool = False) -> bool:
    """Prompt user for confirmation.

    Args:
        message: The confirmation message to display.
        default: Default choice if user just presses enter.

    Returns:
        True if user confirmed, False otherwise.
    """
    return Confirm.ask(message, default=default)


def prompt(message: str, default: str | None = None, password: bool = False) -> str:
    """Prompt user for text input.

    Args:
        message: The prompt message to display.
        default: Default value if user just presses enter.
        password: Hide the typed input.

    Returns:
        The user's input string.
    """
    if default is None:
        return Prompt.ask(message, password=password)
    return Prompt.ask(message, default=default, password=password)
