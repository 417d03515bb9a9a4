"""
``--filter key=value`` handling shared by the listing commands.

A command declares which filter keys take a single value (the last occurrence
wins) and which accumulate values (order of appearance is kept).  The parsed
set can then be queried per key, validated against a closed vocabulary, or
projected to the compact JSON object the server expects as ``search``.
"""

from __future__ import annotations

import json
import re
from typing import Dict, Iterable, List, Optional, Sequence

from ..errors import FilterError

__all__ = ["Filters", "split_key_value"]

_WRONG_FORMAT = "wrong input format. Please use --filter filter_name=filter_value"
_WHITESPACE = re.compile(r"\s")


def _quoted(items: Iterable[str]) -> str:
    return "', '".join(items)


def split_key_value(item: str) -> tuple[str, str]:
    """Split *item* on its first ``=``.

    Raises:
        ValueError: If there is no ``=`` or the key is empty.
    """
    if "=" not in item:
        raise ValueError(f"'{item}' is not in KEY=VALUE format")
    key, value = item.split("=", 1)
    if not key:
        raise ValueError(f"'{item}' has an empty key")
    return key, value


class Filters:
    """Filter set split into single-value and multi-value keys.

    Args:
        single_keys: Keys whose repeated occurrences replace each other.
        multi_keys: Keys whose occurrences accumulate.
        inputs: Raw ``key=value`` strings from the command line.

    Raises:
        FilterError: On a malformed entry or an undeclared key.
    """

    def __init__(
        self,
        single_keys: Optional[Sequence[str]] = None,
        multi_keys: Optional[Sequence[str]] = None,
        inputs: Iterable[str] = (),
    ) -> None:
        self.single_keys: List[str] = list(single_keys or [])
        self.multi_keys: List[str] = list(multi_keys or [])
        self._single: Dict[str, str] = {}
        self._multi: Dict[str, List[str]] = {}
        for item in inputs:
            self.add(item)

    # ------------------------------------------------------------------ #
    # Parsing                                                            #
    # ------------------------------------------------------------------ #
    def _available(self) -> str:
        return _quoted(self.single_keys + self.multi_keys)

    def _unknown_key(self, key: str) -> FilterError:
        return FilterError(
            f"filter key '{key}' is not valid\nAvailable filters are '{self._available()}'"
        )

    def add(self, item: str) -> None:
        """Add one ``key=value`` entry."""
        try:
            key, value = split_key_value(item)
        except ValueError:
            raise FilterError(_WRONG_FORMAT) from None
        if _WHITESPACE.search(key):
            raise FilterError(_WRONG_FORMAT)
        key = key.lower()

        if key in self.single_keys:
            self._single[key] = value
        elif key in self.multi_keys:
            self._multi.setdefault(key, []).append(value)
        else:
            raise self._unknown_key(key)

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #
    def get_single(self, key: str) -> str:
        """Return the value of single-value *key*, ``""`` when unset."""
        if key not in self.single_keys:
            raise FilterError(
                f"'{key}' is not a valid single value filter\n"
                f"Available filters are '{_quoted(self.single_keys)}'"
            )
        return self._single.get(key, "")

    def get_multi(self, key: str) -> List[str]:
        """Return the values of multi-value *key* in order of appearance."""
        if key not in self.multi_keys:
            raise FilterError(
                f"'{key}' is not a valid multi value filter\n"
                f"Available filters are '{_quoted(self.multi_keys)}'"
            )
        return list(self._multi.get(key, []))

    def get_json(self, keys: Iterable[str]) -> str:
        """Return the set values of *keys* as compact JSON, ``""`` if none is set.

        Keys are emitted in sorted order so that the ``search`` parameter is
        stable across invocations.
        """
        selected: Dict[str, object] = {}
        for key in keys:
            if key in self.single_keys:
                if key in self._single:
                    selected[key] = self._single[key]
            elif key in self.multi_keys:
                if key in self._multi:
                    selected[key] = list(self._multi[key])
            else:
                raise self._unknown_key(key)
        if not selected:
            return ""
        return json.dumps(selected, sort_keys=True, separators=(",", ":"))

    def validate_values(self, key: str, allowed: Sequence[str]) -> None:
        """Require every value given for *key* to be one of *allowed*."""
        if key in self.single_keys:
            values = [self._single[key]] if key in self._single else []
        elif key in self.multi_keys:
            values = self._multi.get(key, [])
        else:
            raise self._unknown_key(key)

        for value in values:
            if value not in allowed:
                raise FilterError(
                    f"'{value}' is not a valid value for the filter '{key}'\n"
                    f"Available values are '{_quoted(allowed)}'"
                )
