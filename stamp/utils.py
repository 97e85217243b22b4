"""Rich-based console output helpers shared by the CLI and the prompts.

Progress and results go to standard output; errors go to standard error so
they stay visible when output is piped.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    """Print a green success message. *message* is plain text, not markup."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message to standard error."""
    err_console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_error_chain(exc: BaseException) -> None:
    """Print *exc* followed by every exception it was raised from."""
    print_error(f"Error: {exc}")
    for cause in error_chain(exc)[1:]:
        err_console.print(f"[red]caused by:[/red] {escape(str(cause))}", highlight=False)


def error_chain(exc: BaseException) -> list[BaseException]:
    """Return *exc* and its ``__cause__`` chain, outermost first."""
    chain: list[BaseException] = []
    current: BaseException | None = exc
    while current is not None and current not in chain:
        chain.append(current)
        current = current.__cause__
    return chain


def print_file_list(paths: Iterable[Path], root: Path) -> None:
    """Print written files relative to *root*, one per line."""
    for path in paths:
        try:
            shown = path.relative_to(root)
        except ValueError:
            shown = path
        console.print(f"[dim]│[/]  {escape(str(shown))}", highlight=False)
