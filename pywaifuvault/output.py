"""Output formatting for the WaifuVault CLI."""

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table

from .utils import format_size


class OutputFormatter:
    """Prints command results as rich text or as JSON.

    Informational messages are suppressed in quiet mode and in JSON mode,
    errors and warnings are always shown on stderr.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(highlight=False, soft_wrap=True)
        self.err_console = Console(stderr=True, highlight=False, soft_wrap=True)

    def print(self, message: str = "") -> None:
        if self.json_output:
            return
        self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        if self.quiet or self.json_output:
            return
        self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        self.err_console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        self.err_console.print(message, style="bold red", markup=False)

    def output_json(self, data: Any) -> None:
        click.echo(json.dumps(data, indent=2))

    def format_size(self, size_bytes: int) -> str:
        return format_size(size_bytes)

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a titled list of label/value pairs.

        Args:
            title: Summary heading
            items: (label, value) pairs
        """
        if self.json_output:
            return
        self.console.print(title, style="bold", markup=False)
        width = max((len(label) for label, _ in items), default=0)
        for label, value in items:
            self.console.print(f"  {label + ':':<{width + 1}} {value}", markup=False)

    def output_table(
        self,
        data: list[dict[str, Any]],
        columns: list[str],
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        """Print rows as a table.

        Args:
            data: Rows keyed by column name
            columns: Column names to show, in order
            headers: Optional display names for the columns
        """
        if self.json_output:
            self.output_json(data)
            return
        headers = headers or {}
        table = Table(show_edge=False)
        for column in columns:
            table.add_column(headers.get(column, column))
        for row in data:
            table.add_row(*(str(row.get(column, "")) for column in columns))
        self.console.print(table)
