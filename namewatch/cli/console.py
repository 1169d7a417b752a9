"""Console output for the CLI.

Wraps rich for consistent output. All CLI output should go through this module.
"""

from typing import Any

from rich.console import Console as RichConsole
from rich.table import Table

from namewatch.cli.models import Notification, StepOutcome


class Console:
    """CLI output manager wrapping rich."""

    def __init__(
        self,
        *,
        force_terminal: bool | None = None,
        quiet: bool = False,
    ) -> None:
        """Initialize the console.

        Args:
            force_terminal: Force terminal mode (True/False) or auto-detect (None).
            quiet: Suppress non-essential output.
        """
        self._console = RichConsole(force_terminal=force_terminal, stderr=False)
        self._err_console = RichConsole(force_terminal=force_terminal, stderr=True)
        self._quiet = quiet

    # -------------------------------------------------------------------------
    # Status messages
    # -------------------------------------------------------------------------

    def success(self, message: str) -> None:
        self._console.print(f"[green]✓[/green] {message}")

    def error(self, message: str, *, hint: str | None = None) -> None:
        """Print an error message to stderr."""
        self._err_console.print(f"[red]✗[/red] {message}")
        if hint:
            self._err_console.print(f"  [dim]{hint}[/dim]")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def info(self, message: str) -> None:
        """Print an info message (suppressed in quiet mode)."""
        if not self._quiet:
            self._console.print(f"[dim]{message}[/dim]")

    def print(self, *args: Any, **kwargs: Any) -> None:
        self._console.print(*args, **kwargs)

    def print_json(self, data: str) -> None:
        """Print a JSON document, highlighted on terminals."""
        self._console.print_json(data)

    # -------------------------------------------------------------------------
    # Replay output
    # -------------------------------------------------------------------------

    def step_outcomes(self, outcomes: list[StepOutcome]) -> None:
        for outcome in outcomes:
            line = f"[dim]{outcome.index:>3}[/dim] {outcome.action} [cyan]{outcome.target}[/cyan]"
            if outcome.detail:
                line += f"  [dim]{outcome.detail}[/dim]"
            if outcome.ok:
                self.success(line)
            else:
                self.error(line)

    def notifications(self, notifications: list[Notification]) -> None:
        if not notifications:
            self.info("No notifications delivered")
            return

        table = Table(title="Notifications", show_header=True, header_style="bold")
        table.add_column("Step", style="dim", width=4)
        table.add_column("Name")
        table.add_column("Callback")
        table.add_column("Context")

        for n in notifications:
            table.add_row(str(n.step), n.name, n.callback, n.context or "")

        self._console.print(table)


_default: Console | None = None


def get_console() -> Console:
    """Get the default console instance."""
    global _default
    if _default is None:
        _default = Console()
    return _default
