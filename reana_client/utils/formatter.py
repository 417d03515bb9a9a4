"""
``--format`` parsing, column selection, sorting and output of tables.

The helpers operate on :class:`~reana_client.utils.table.Table` and are shared
by every command that prints tabular results:

1. :func:`parse_format_parameters` turns ``--format name,status=running`` into
   :class:`FormatFilter` items;
2. :func:`sort_table` orders rows, with dedicated orderings for dotted run
   numbers and for human-readable sizes;
3. :func:`format_table` projects columns in the requested order and, where the
   command allows it, keeps only rows matching ``column=value``;
4. :func:`emit_table` prints the result as a table or as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional

from ..errors import FormatError, SortError
from .display import display_json, display_table
from .table import Table

__all__ = [
    "FormatFilter",
    "parse_format_parameters",
    "format_table",
    "sort_table",
    "run_number_key",
    "emit_table",
    "format_session_uri",
]


@dataclass(frozen=True)
class FormatFilter:
    """One ``--format`` token."""

    column: str
    value: Optional[str] = None
    filter_rows: bool = False


def parse_format_parameters(options: Iterable[str], filter_rows: bool) -> List[FormatFilter]:
    """Parse ``--format`` values into :class:`FormatFilter` items.

    Args:
        options: Raw option values; each may hold several comma-separated
            tokens of the form ``column`` or ``column=value``.
        filter_rows: Whether the command honours ``=value`` row filtering.
            When ``False`` the value part is ignored.

    Returns:
        One item per token, in order of appearance.
    """
    parsed: List[FormatFilter] = []
    for option in options:
        for token in option.split(","):
            token = token.strip()
            if not token:
                continue
            column, sep, value = token.partition("=")
            if filter_rows and sep:
                parsed.append(FormatFilter(column=column, value=value, filter_rows=True))
            else:
                parsed.append(FormatFilter(column=column))
    return parsed


def format_table(table: Table, filters: List[FormatFilter]) -> Table:
    """Select the filter columns in order, then apply the row filters.

    Raises:
        FormatError: If a requested column is not part of *table*.
    """
    if not filters:
        return table

    for item in filters:
        if item.column not in table.header:
            raise FormatError(item.column, table.header)

    result = table.select([item.column for item in filters])
    for item in filters:
        if item.filter_rows:
            result = result.filter_equal(item.column, item.value or "")
    return result


def run_number_key(value: object) -> Optional[float]:
    """Map ``major[.minor]`` to ``major * 1000 + minor``.

    Minor numbers of 1000 and above overlap the next major number.
    """
    major, _, minor = str(value).partition(".")
    try:
        return int(major) * 1000 + (int(minor) if minor else 0)
    except ValueError:
        return None


def sort_table(
    table: Table,
    column: str,
    reverse: bool = False,
    size_map: Optional[Mapping[str, float]] = None,
) -> Table:
    """Order *table* by *column* (case-insensitive).

    ``run_number`` uses :func:`run_number_key`; ``size`` uses *size_map* (human
    readable text -> raw bytes) when it is given.

    Raises:
        SortError: If *column* is not part of the table.
    """
    column = column.lower()
    if column not in table.header:
        raise SortError(f"column '{column}' does not exist")

    key = None
    if column == "run_number":
        key = run_number_key
    elif column == "size" and size_map is not None:
        key = lambda text: size_map.get(str(text))  # noqa: E731
    return table.sort(column, reverse=reverse, key=key)


def emit_table(table: Table, json_output: bool) -> None:
    """Print *table* as JSON records or as a borderless table."""
    if json_output:
        display_json(table.records())
    else:
        display_table(table.header, table.string_rows())


def format_session_uri(server_url: str, path: str, token: str) -> str:
    return f"{server_url}{path}?token={token}"
