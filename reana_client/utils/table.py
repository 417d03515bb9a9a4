"""
In-memory tabular model backing every table-shaped command output.

:class:`Table` wraps a :class:`pandas.DataFrame` whose columns use pandas'
nullable extension dtypes, so a missing cell is a first-class ``<NA>`` in every
column kind instead of a sentinel string or a float ``NaN``.  Nulls render as
``-`` in tables, as ``null`` in JSON, and never compare equal to any string.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd

__all__ = ["Table", "KINDS", "cell_text"]

# Column kind -> pandas nullable dtype.
KINDS: Dict[str, str] = {
    "str": "string",
    "int": "Int64",
    "float": "Float64",
    "bool": "boolean",
}

NULL_TEXT = "-"


def _python(value: Any) -> Any:
    """Return *value* as a plain Python scalar, ``None`` for nulls."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value.item() if hasattr(value, "item") else value


def cell_text(value: Any) -> Optional[str]:
    """Return the string form of a cell, ``None`` when the cell is null."""
    value = _python(value)
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Table:
    """Typed, column-oriented table.

    Args:
        columns: Column names in display order.
        rows: Initial rows; each row lists one value per column, ``None`` for
            a null cell.
        kinds: Column name -> ``str``, ``int``, ``float`` or ``bool``.
            Unlisted columns are ``str``.
    """

    def __init__(
        self,
        columns: Sequence[str],
        rows: Iterable[Sequence[Any]] = (),
        kinds: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.kinds: Dict[str, str] = {c: (kinds or {}).get(c, "str") for c in columns}
        rows = [list(r) for r in rows]
        data = {
            col: pd.array([row[idx] for row in rows], dtype=KINDS[self.kinds[col]])
            for idx, col in enumerate(columns)
        }
        self.frame = pd.DataFrame(data, columns=list(columns))

    @classmethod
    def _wrap(cls, frame: pd.DataFrame, kinds: Mapping[str, str]) -> "Table":
        table = cls.__new__(cls)
        table.kinds = {c: kinds[c] for c in frame.columns}
        table.frame = frame.reset_index(drop=True)
        return table

    # ------------------------------------------------------------------ #
    # Shape                                                              #
    # ------------------------------------------------------------------ #
    @property
    def header(self) -> List[str]:
        return [str(c) for c in self.frame.columns]

    def __len__(self) -> int:
        return len(self.frame)

    def append(self, row: Sequence[Any]) -> None:
        """Append one row; ``None`` marks a null cell."""
        extra = Table(self.header, [row], self.kinds).frame
        if self.frame.empty:
            self.frame = extra
        else:
            self.frame = pd.concat([self.frame, extra], ignore_index=True)

    # ------------------------------------------------------------------ #
    # Relational operations                                              #
    # ------------------------------------------------------------------ #
    def select(self, columns: Sequence[str]) -> "Table":
        """Return a table holding *columns* in the given order.

        Raises:
            KeyError: If a column does not exist.
        """
        missing = [c for c in columns if c not in self.kinds]
        if missing:
            raise KeyError(missing[0])
        return Table._wrap(self.frame.loc[:, list(columns)], self.kinds)

    def filter(self, predicate: Callable[[Dict[str, Any]], bool]) -> "Table":
        """Keep the rows for which *predicate(record)* is true."""
        return self._masked([bool(predicate(rec)) for rec in self.records()])

    def _masked(self, mask: List[bool]) -> "Table":
        keep = pd.Series(mask, index=self.frame.index, dtype=bool)
        return Table._wrap(self.frame[keep], self.kinds)

    def filter_equal(self, column: str, value: str) -> "Table":
        """Keep the rows whose *column* renders exactly as *value*."""
        mask = [cell_text(v) == value for v in self.frame[column]]
        return self._masked(mask)

    def sort(
        self,
        column: str,
        reverse: bool = False,
        key: Optional[Callable[[Any], Any]] = None,
    ) -> "Table":
        """Return the rows ordered by *column*; nulls always go last.

        Args:
            column: Column to order by.
            reverse: Descending order.
            key: Maps a non-null cell to a numeric sort key.  Cells for which
                the key returns ``None`` are treated as nulls.
        """
        series_key = None
        if key is not None:

            def series_key(series: pd.Series) -> pd.Series:
                mapped = [None if _python(v) is None else key(_python(v)) for v in series]
                return pd.Series(pd.array(mapped, dtype="Float64"), index=series.index)

        frame = self.frame.sort_values(
            column,
            ascending=not reverse,
            na_position="last",
            kind="mergesort",
            key=series_key,
        )
        return Table._wrap(frame, self.kinds)

    # ------------------------------------------------------------------ #
    # Rendering                                                          #
    # ------------------------------------------------------------------ #
    def records(self) -> List[Dict[str, Any]]:
        """Return the rows as dicts of plain Python values (``None`` for nulls)."""
        header = self.header
        return [
            {col: _python(val) for col, val in zip(header, row)}
            for row in self.frame.itertuples(index=False, name=None)
        ]

    def string_rows(self) -> List[List[str]]:
        """Return the cells as strings, nulls rendered as ``-``."""
        rows = []
        for row in self.frame.itertuples(index=False, name=None):
            texts = [cell_text(v) for v in row]
            rows.append([NULL_TEXT if t is None else t for t in texts])
        return rows
