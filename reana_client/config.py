"""
Static catalogs and environment lookups shared by every command.

Nothing in here performs I/O beyond reading environment variables; the values
are plain Python containers so that commands, validators and tests can import
them without side effects.
"""

from __future__ import annotations

import os
from typing import Dict, List, Optional

__all__ = [
    "SERVER_URL_ENV",
    "ACCESS_TOKEN_ENV",
    "WORKFLOW_ENV",
    "TIMEOUT_ENV",
    "VERIFY_TLS_ENV",
    "DEFAULT_TIMEOUT",
    "CHECK_INTERVAL",
    "FOLLOW_INTERVAL",
    "LEADING_MARK",
    "STDOUT_CHAR",
    "FILES_BLACKLIST",
    "INTERACTIVE_SESSION_TYPES",
    "COMPUTE_BACKENDS",
    "UPDATE_STATUS_ACTIONS",
    "QUOTA_REPORTS",
    "LOG_LEVELS",
    "PROFILE_MODES",
    "LIST_MULTI_FILTERS",
    "DU_MULTI_FILTERS",
    "LOGS_SINGLE_FILTERS",
    "LOGS_MULTI_FILTERS",
    "LS_MULTI_FILTERS",
    "OPERATIONAL_OPTIONS",
    "get_run_statuses",
    "progressing_statuses",
    "terminal_statuses",
    "default_timeout",
    "verify_tls_from_env",
]

# --------------------------------------------------------------------------- #
# Environment variables
# --------------------------------------------------------------------------- #
SERVER_URL_ENV = "REANA_SERVER_URL"
ACCESS_TOKEN_ENV = "REANA_ACCESS_TOKEN"
WORKFLOW_ENV = "REANA_WORKON"
TIMEOUT_ENV = "REANA_TIMEOUT"
VERIFY_TLS_ENV = "REANA_VERIFY_TLS"

DEFAULT_TIMEOUT = 60.0

# --------------------------------------------------------------------------- #
# Polling and display constants
# --------------------------------------------------------------------------- #
CHECK_INTERVAL = 5  # seconds between status polls of ``start --follow``
FOLLOW_INTERVAL = 10  # default seconds between polls of ``logs --follow``

LEADING_MARK = "==>"
STDOUT_CHAR = "-"

FILES_BLACKLIST = [".git/", "/.git/"]
INTERACTIVE_SESSION_TYPES = ["jupyter"]

COMPUTE_BACKENDS: Dict[str, str] = {
    "kubernetes": "Kubernetes",
    "htcondor": "HTCondor",
    "slurm": "Slurm",
}

UPDATE_STATUS_ACTIONS = ["start", "stop", "deleted"]
QUOTA_REPORTS = ["limit", "usage"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING"]
PROFILE_MODES = ["none", "cpu", "heap"]

# --------------------------------------------------------------------------- #
# Filter declarations per command
# --------------------------------------------------------------------------- #
LIST_MULTI_FILTERS = ["name", "status"]
DU_MULTI_FILTERS = ["size", "name"]
LOGS_SINGLE_FILTERS = ["compute_backend", "docker_img", "status"]
LOGS_MULTI_FILTERS = ["step"]
LS_MULTI_FILTERS = ["name", "size", "last-modified"]

# --------------------------------------------------------------------------- #
# Operational options: user-facing name -> {workflow engine: server key}
# --------------------------------------------------------------------------- #
OPERATIONAL_OPTIONS: Dict[str, Dict[str, str]] = {
    "CACHE": {"serial": "CACHE"},
    "FROM": {"serial": "FROM"},
    "TARGET": {"serial": "TARGET", "cwl": "--target"},
    "toplevel": {"yadage": "toplevel"},
    "initdir": {"yadage": "initdir"},
    "initfiles": {"yadage": "initfiles"},
    "accept_metadir": {"yadage": "accept_metadir"},
    "report": {"snakemake": "report"},
}

# --------------------------------------------------------------------------- #
# Run statuses
# --------------------------------------------------------------------------- #
_COMPLETED_STATUSES = ["finished", "failed", "stopped"]
_PROGRESSING_STATUSES = ["created", "running", "queued", "pending"]


def get_run_statuses(include_deleted: bool) -> List[str]:
    """Return every run status, with ``deleted`` only when requested."""
    statuses = _COMPLETED_STATUSES + _PROGRESSING_STATUSES
    if include_deleted:
        statuses = statuses + ["deleted"]
    return statuses


def progressing_statuses() -> List[str]:
    """Return the statuses of a workflow that has not reached an end state."""
    return list(_PROGRESSING_STATUSES)


def terminal_statuses() -> List[str]:
    """Return the statuses after which a workflow no longer changes."""
    return _COMPLETED_STATUSES + ["deleted"]


# --------------------------------------------------------------------------- #
# Environment-driven transport settings
# --------------------------------------------------------------------------- #
def default_timeout() -> Optional[float]:
    """Return the timeout configured via ``REANA_TIMEOUT`` or ``DEFAULT_TIMEOUT``."""
    env = os.getenv(TIMEOUT_ENV)
    if not env:
        return DEFAULT_TIMEOUT
    try:
        return float(env)
    except ValueError:
        return DEFAULT_TIMEOUT


def verify_tls_from_env() -> bool:
    """Return ``True`` when ``REANA_VERIFY_TLS`` asks for certificate checks."""
    return os.getenv(VERIFY_TLS_ENV, "").strip().lower() in {"1", "true", "yes"}
