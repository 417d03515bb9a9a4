"""
Package-level logging configuration.

* Rich console output on *stderr* with full timestamps, so that log lines never
  mix with tables or JSON written to *stdout*.
* structlog bound loggers filtered at the level chosen with ``--loglevel``.

The public helper :func:`setup_logging` wires everything and should be the
sole entry-point used by the root command.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.dev import ConsoleRenderer as StructlogConsoleRenderer
from structlog.stdlib import LoggerFactory

__all__ = ["setup_logging", "parse_level", "redact_params"]

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
}

_REDACTED = "***"


def parse_level(name: str) -> int:
    """Return the numeric level for *name* (case-insensitive).

    Raises:
        KeyError: If *name* is not one of ``DEBUG``, ``INFO`` or ``WARNING``.
    """
    return _LEVELS[name.upper()]


# --------------------------------------------------------------------------- #
# Token redaction                                                             #
# --------------------------------------------------------------------------- #
def redact_params(params: Optional[Mapping[str, object]]) -> dict:
    """Return a copy of *params* with the access token masked."""
    clean = dict(params or {})
    if clean.get("access_token"):
        clean["access_token"] = _REDACTED
    return clean


# --------------------------------------------------------------------------- #
# Public API – main entry-point                                               #
# --------------------------------------------------------------------------- #
def setup_logging(level: str = "WARNING") -> None:
    """Configure rich console logging on *stderr* and structlog filtering.

    Args:
        level: ``DEBUG``, ``INFO`` or ``WARNING``.  Validation of the value is
            the caller's job; unknown names raise :class:`KeyError`.
    """
    console_lvl = parse_level(level)

    console = RichHandler(
        level=console_lvl,
        console=Console(stderr=True),
        show_path=False,
        log_time_format="%Y-%m-%d %H:%M:%S.%f",
        rich_tracebacks=True,
        tracebacks_show_locals=False,
        markup=False,
    )

    # --- Configure root logger --------------------------------------------------
    logging.basicConfig(
        level=console_lvl,
        handlers=[console],
        format="%(message)s",  # Rich/structlog handle formatting
        force=True,
    )
    # urllib3 is chatty at DEBUG; the transport logs its own request lines.
    logging.getLogger("urllib3").setLevel(max(console_lvl, logging.INFO))

    # --- structlog binds --------------------------------------------------------
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            StructlogConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(console_lvl),
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=False,
    )
