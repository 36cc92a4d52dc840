import logging
from rich.logging import RichHandler
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typing import Dict, List, Optional

from .schemas import ExecutionPlan, ReadinessRecord, ReadinessState

_STATE_STYLES = {
    ReadinessState.HEALTHY: "green",
    ReadinessState.RUNNING: "green",
    ReadinessState.STARTING: "yellow",
    ReadinessState.UNHEALTHY: "red",
    ReadinessState.TIMED_OUT: "bold red",
    ReadinessState.UNKNOWN: "dim",
}


class Display:
    """
    A centralized display handler for all CLI output.

    LOGGING STANDARDS:

    This module handles structured UI elements (tables, panels, planned actions)
    and configures the logging system. All other modules should use Python's
    logging system for user communication:

    - DEBUG: Internal state changes, backend commands, poll results (verbose mode only)
    - INFO: Selected services, strategy progress, services becoming ready
    - WARNING: Transient backend hiccups, skipped phases
    - ERROR: Failed operations, aborted runs

    EXCEPTION: action() echoes planned backend commands directly to the console,
    since the "+ command" trace is the product of a dry run, not a log message.
    """

    def __init__(self, verbose: bool = False):
        self._console = Console()
        self._verbose = verbose

        # Clear any existing handlers to avoid duplicate logs
        root_logger = logging.getLogger()
        if root_logger.hasHandlers():
            root_logger.handlers.clear()

        logging.basicConfig(
            level="DEBUG" if verbose else "INFO",
            format="%(message)s",
            datefmt="[%X]",
            handlers=[RichHandler(console=self._console, rich_tracebacks=True, show_path=verbose, show_level=verbose)]
        )

    @property
    def verbose(self) -> bool:
        """Returns whether verbose mode is enabled."""
        return self._verbose

    def success(self, message: str):
        """Prints a success message."""
        self._console.print(f"[bold green]Success:[/] {message}")

    def error(self, message: str, suggestion: Optional[str] = None):
        """Prints an error message and an optional suggestion."""
        error_panel = Panel(
            f"[bold red]Error:[/] {message}\n"
            + (f"\n[bold]Suggestion:[/] {suggestion}" if suggestion else ""),
            border_style="red",
            expand=False,
        )
        self._console.print(error_panel)

    def action(self, command: str):
        """Echoes a backend command as it is issued (or would be, in a dry run)."""
        self._console.print(f"+ {command}", markup=False, highlight=False)

    def plan(self, plan: ExecutionPlan):
        """Summarises the planned actions of a run."""
        if not plan.actions:
            return
        title = "Planned actions (dry run)" if plan.dry_run else "Actions"
        lines = [f"{i}. {action.describe()}" for i, action in enumerate(plan.actions, start=1)]
        self._console.print(
            Panel("\n".join(lines), title=f"[bold]{title}[/bold]", border_style="blue", expand=False)
        )

    def readiness(self, records: Dict[str, ReadinessRecord]):
        """Displays the final readiness state of every targeted service."""
        table = Table(title="Final status")
        table.add_column("Service", style="cyan")
        table.add_column("State")
        table.add_column("Last checked", style="dim")
        table.add_column("Detail", style="dim")

        for name, record in records.items():
            style = _STATE_STYLES.get(record.state, "")
            table.add_row(
                f"[bold]{name}[/bold]",
                f"[{style}]{record.state.value}[/]" if style else record.state.value,
                record.last_checked_at.strftime("%H:%M:%S") if record.last_checked_at else "N/A",
                record.detail or "",
            )
        self._console.print(table)

    def services(self, catalog: List[str], selected: List[str], running: Optional[List[str]] = None):
        """Displays the declared services and which of them the filters select."""
        table = Table(title="Declared services")
        table.add_column("Service", style="cyan")
        table.add_column("Selected", style="magenta")
        if running is not None:
            table.add_column("Running", style="green")

        chosen = set(selected)
        up = set(running or [])
        for name in catalog:
            row = [name, "✅" if name in chosen else "❌"]
            if running is not None:
                row.append("✅" if name in up else "❌")
            table.add_row(*row)
        self._console.print(table)
