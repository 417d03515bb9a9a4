"""Utility functions to print tagged messages, tables and JSON on the console."""

from __future__ import annotations

import io
import json
from typing import Any, Optional, Sequence

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..config import LEADING_MARK

__all__ = [
    "SUCCESS",
    "WARNING",
    "ERROR",
    "INFO",
    "JOB_STATUS_COLORS",
    "RESOURCE_HEALTH_COLORS",
    "display_message",
    "print_colorable",
    "display_table",
    "render_table",
    "display_json",
]

SUCCESS = "SUCCESS"
WARNING = "WARNING"
ERROR = "ERROR"
INFO = "INFO"

_KIND_COLORS = {
    SUCCESS: "green",
    WARNING: "yellow",
    ERROR: "red",
    INFO: "cyan",
}

JOB_STATUS_COLORS = {
    "failed": "red",
    "finished": "green",
    "running": "cyan",
}

# Wide enough that table cells are never wrapped.
_TABLE_WIDTH = 10_000

RESOURCE_HEALTH_COLORS = {
    "healthy": "green",
    "warning": "yellow",
    "critical": "red",
}


def display_message(
    message: str,
    kind: str = INFO,
    indented: bool = False,
    *,
    err: bool = False,
) -> None:
    """Echo *message* prefixed with the leading mark and a coloured tag.

    Top-level ``INFO`` messages are printed in bold without a tag; every other
    combination prints ``<mark> <KIND>: `` in the colour of *kind* followed by
    the plain message.

    Args:
        message: Text to display.
        kind: One of ``SUCCESS``, ``WARNING``, ``ERROR`` or ``INFO``.
        indented: Use the ``  ->`` prefix for sub-items.
        err: Write to *stderr* instead of *stdout*.
    """
    prefix = "  ->" if indented else LEADING_MARK

    if kind == INFO and not indented:
        click.secho(f"{prefix} {message}", bold=True, err=err)
        return

    click.secho(f"{prefix} {kind}: ", fg=_KIND_COLORS.get(kind), bold=True, nl=False, err=err)
    click.echo(message, err=err)


def print_colorable(
    text: str,
    fg: Optional[str] = None,
    *,
    bold: bool = False,
    nl: bool = True,
    err: bool = False,
) -> None:
    """Echo *text* in colour *fg*; ``None`` keeps the terminal default."""
    click.secho(text, fg=fg, bold=bold, nl=nl, err=err)


def render_table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Return *rows* laid out under an upper-cased *header* without borders.

    Args:
        header: Column names.
        rows: Already stringified cells, one list per row.

    Returns:
        The table as a single string, one line per row, no trailing newline.
    """
    table = Table(box=None, show_edge=False, header_style=None)
    for title in header:
        table.add_column(Text(str(title).upper()), no_wrap=True)
    for row in rows:
        table.add_row(*(Text(str(cell)) for cell in row))

    console = Console(
        file=io.StringIO(),
        width=_TABLE_WIDTH,
        color_system=None,
        markup=False,
        emoji=False,
        highlight=False,
    )
    with console.capture() as capture:
        console.print(table)
    return "\n".join(line.rstrip() for line in capture.get().splitlines())


def display_table(
    header: Sequence[str],
    rows: Sequence[Sequence[str]],
    *,
    err: bool = False,
) -> None:
    """Echo a table built by :func:`render_table`."""
    click.echo(render_table(header, rows), err=err)


def display_json(data: Any) -> None:
    """Echo *data* as JSON indented with two spaces and a trailing newline."""
    click.echo(json.dumps(data, indent=2))
