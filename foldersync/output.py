"""Console output formatting for the FolderSync CLI."""

import json
import sys
from typing import Any, Optional

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Prints messages, summaries and JSON using rich.

    Errors and warnings go to stderr; everything else goes to stdout.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of rich text
            quiet: Suppress informational output
            console: Console for regular output
            err_console: Console for warnings and errors
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain line unless quiet or in JSON mode."""
        if not self.quiet and not self.json_output:
            self.console.print(message, markup=False, soft_wrap=True)

    def info(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(message, style="cyan", markup=False, soft_wrap=True)

    def success(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(message, style="green", markup=False, soft_wrap=True)

    def warning(self, message: str) -> None:
        if not self.json_output:
            self.err_console.print(
                message, style="yellow", markup=False, soft_wrap=True
            )

    def error(self, message: str) -> None:
        if self.json_output:
            print(json.dumps({"error": message}), file=sys.stderr)
        else:
            self.err_console.print(
                message, style="bold red", markup=False, soft_wrap=True
            )

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON on stdout."""
        print(json.dumps(data, indent=2, default=str))

    def print_summary(self, title: str, rows: list[tuple[str, Any]]) -> None:
        """Print a two-column summary table.

        Args:
            title: Table title
            rows: (label, value) pairs
        """
        if self.quiet or self.json_output:
            return
        table = Table(title=title, show_header=False, title_justify="left")
        table.add_column("Item", style="bold")
        table.add_column("Value")
        for label, value in rows:
            table.add_row(label, str(value))
        self.console.print(table)
