"""Where specir's results and diagnostics go.

Lowered data (the JSON model from ``specir dump``, the declaration and
operation tables) goes to stdout, or to the ``-o`` file when one is given.
Errors and ``--verbose`` debug lines go to stderr so a generator piping
stdout never sees them.

The table format is picked once per run: ``--json`` gives an array of
records keyed by column header, ``--plain`` gives tab-separated lines, and
otherwise a Rich table is drawn when stdout is a colour terminal (plain
lines when it is not). ``--no-color`` and ``NO_COLOR`` turn colour off.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormat(str, Enum):
    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def _stdout_is_terminal() -> bool:
    return sys.stdout.isatty()


class OutputManager:
    """Output preferences for one ``specir`` invocation.

    Args:
        format: Table format; ``AUTO`` becomes ``RICH`` on a colour
            terminal and ``PLAIN`` anywhere else.
        no_color: Strip colour from everything written.
        verbose: Show :meth:`debug` lines.
        output_file: Write data here (replacing the file) instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self.no_color = no_color or "NO_COLOR" in os.environ
        self.verbose = verbose
        self.output_file = output_file
        if format == OutputFormat.AUTO:
            color_terminal = _stdout_is_terminal() and not self.no_color
            format = OutputFormat.RICH if color_terminal else OutputFormat.PLAIN
        self.format = format

        # Both consoles look up sys.stdout / sys.stderr on every write
        self._data = Console(no_color=self.no_color, soft_wrap=True)
        self._diagnostics = Console(stderr=True, no_color=self.no_color, soft_wrap=True)

    @property
    def _styled(self) -> bool:
        return self.format == OutputFormat.RICH and not self.output_file

    def _write(self, text: str) -> None:
        if self.output_file:
            with open(self.output_file, "w", encoding="utf-8") as f:
                f.write(text + "\n")
        else:
            sys.stdout.write(text + "\n")
            sys.stdout.flush()

    def print_json(self, data: Any) -> None:
        """Write *data* as indented JSON, highlighted on a colour terminal."""
        if self._styled:
            self._data.print_json(data=data, default=str)
        else:
            self._write(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        if self.format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self._write(json.dumps(records, indent=2, ensure_ascii=False))
        elif not self._styled:
            self._write("\n".join("\t".join(line) for line in [headers, *rows]))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._data.print(table)

    def error(self, message: str) -> None:
        self._diagnostics.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def debug(self, message: str) -> None:
        if self.verbose:
            self._diagnostics.print(f"[dim]debug: {escape(message)}[/dim]")


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """The manager installed by the CLI callback, or a default one."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
