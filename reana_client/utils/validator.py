"""
Input validators used by the root command and the command handlers.

Each validator raises :class:`~reana_client.errors.ConfigurationError` or
:class:`~reana_client.errors.ValidationError` with the exact message shown to
the user; callers never re-phrase them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import structlog

from ..config import OPERATIONAL_OPTIONS
from ..errors import ConfigurationError, ValidationError

__all__ = [
    "validate_access_token",
    "validate_server_url",
    "validate_workflow",
    "validate_choice",
    "validate_at_least_one",
    "validate_file",
    "validate_input_parameters",
    "validate_operational_options",
]

log = structlog.get_logger()


# --------------------------------------------------------------------------- #
# Configuration values                                                        #
# --------------------------------------------------------------------------- #
def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def validate_access_token(token: Optional[str]) -> None:
    if _blank(token):
        raise ConfigurationError(
            "please provide your access token by using the -t/--access-token flag, "
            "or by setting the REANA_ACCESS_TOKEN environment variable"
        )


def validate_server_url(server_url: Optional[str]) -> None:
    if _blank(server_url):
        raise ConfigurationError("please set REANA_SERVER_URL environment variable")


def validate_workflow(workflow: Optional[str]) -> None:
    if _blank(workflow):
        raise ConfigurationError(
            "workflow name must be provided either with `--workflow` option "
            "or with REANA_WORKON environment variable"
        )


# --------------------------------------------------------------------------- #
# Flag values                                                                 #
# --------------------------------------------------------------------------- #
def validate_choice(value: str, choices: Sequence[str], name: str) -> None:
    """Reject *value* unless it is one of *choices*.

    Args:
        value: Value supplied by the user.
        choices: Allowed values.
        name: Flag or argument name used in the message.

    Raises:
        ValidationError: If *value* is not allowed.
    """
    if value not in choices:
        allowed = "', '".join(choices)
        raise ValidationError(
            f"invalid value for '{name}': '{value}' is not part of '{allowed}'"
        )


def validate_at_least_one(given: Mapping[str, object]) -> None:
    """Require that at least one value in *given* (flag name -> value) is set."""
    if not any(given.values()):
        names = "', '".join(given.keys())
        raise ValidationError(f"at least one of the options: '{names}' is required")


def validate_file(path: str | os.PathLike) -> None:
    """Require an existing, readable, non-directory file at *path*."""
    p = Path(path)
    if not p.exists():
        raise ValidationError(f"file '{path}' does not exist")
    if p.is_dir():
        raise ValidationError(f"file '{path}' is a directory")
    if not os.access(p, os.R_OK):
        raise ValidationError(f"file '{path}' is not readable")


# --------------------------------------------------------------------------- #
# Start parameters                                                            #
# --------------------------------------------------------------------------- #
def validate_input_parameters(
    params: Mapping[str, str],
    declared: Iterable[str],
) -> Tuple[Dict[str, str], List[str]]:
    """Drop the input parameters the workflow does not declare.

    Args:
        params: ``-p KEY=VALUE`` pairs given on the command line.
        declared: Parameter names of the stored workflow specification.

    Returns:
        ``(kept, warnings)`` where *kept* holds the known parameters unchanged
        and *warnings* one message per dropped key.
    """
    known = set(declared)
    kept: Dict[str, str] = {}
    warnings: List[str] = []
    for key, value in params.items():
        if key in known:
            kept[key] = value
        else:
            warnings.append(f"given parameter - {key}, is not in reana.yaml")
    return kept, warnings


def validate_operational_options(
    workflow_type: str,
    options: Mapping[str, str],
) -> Dict[str, str]:
    """Translate *options* to the keys understood by the *workflow_type* engine.

    Raises:
        ValidationError: If an option is unknown, or known but not supported
            by the engine.  Nothing is sent in either case.
    """
    translated: Dict[str, str] = {}
    for key, value in options.items():
        engines = OPERATIONAL_OPTIONS.get(key)
        if engines is None:
            raise ValidationError(f"operational option '{key}' not supported")
        server_key = engines.get(workflow_type)
        if server_key is None:
            raise ValidationError(
                f"operational option '{key}' not supported for {workflow_type} workflows"
            )
        log.debug("operational option translated", option=key, key=server_key)
        translated[server_key] = value
    return translated
