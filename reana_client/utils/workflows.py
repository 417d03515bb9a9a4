"""Helpers shared by the workflow commands: names, durations, status phrasing."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Tuple

from ..config import UPDATE_STATUS_ACTIONS
from ..errors import ReanaError

if TYPE_CHECKING:
    from ..api.client import ReanaClient
    from ..api.models import StatusChange, WorkflowStatus

__all__ = [
    "split_name",
    "join_name",
    "get_duration",
    "get_last_command",
    "status_change_message",
    "get_status",
    "update_status",
]

_ISO_FORMAT = "%Y-%m-%dT%H:%M:%S"
_NEWLINES = re.compile(r"\n+")
_BASH_WRAPPER = 'bash -c "cd '


def split_name(name: str) -> Tuple[str, str]:
    """Split ``name[.run_number]`` on the first dot.

    >>> split_name("foo.bar.baz")
    ('foo', 'bar.baz')
    >>> split_name("foo")
    ('foo', '')
    """
    workflow, _, run_number = name.partition(".")
    return workflow, run_number


def join_name(workflow: str, run_number: str) -> str:
    return f"{workflow}.{run_number}" if run_number else workflow


def _parse_timestamp(value: str) -> datetime:
    # The server may append fractional seconds; only whole seconds matter.
    return datetime.strptime(value.split(".", 1)[0], _ISO_FORMAT)


def _utcnow() -> datetime:
    # Server timestamps are naive UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_duration(
    started: Optional[str],
    finished: Optional[str] = None,
    stopped: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Optional[int]:
    """Return the run duration in whole seconds.

    Args:
        started: ISO timestamp of the run start; ``None`` yields ``None``.
        finished: ISO timestamp of the run end.
        stopped: Used when *finished* is missing.
        now: Reference time when both *finished* and *stopped* are missing;
            defaults to the current time.
    """
    if not started:
        return None
    start = _parse_timestamp(started)
    end_text = finished or stopped
    end = _parse_timestamp(end_text) if end_text else (now or _utcnow())
    return int(round((end - start).total_seconds()))


def get_last_command(command: Optional[str], step_name: Optional[str] = None) -> str:
    """Return a readable form of the last command run by a workflow.

    The ``bash -c "cd <dir>; ..."`` wrapper added by job controllers is
    stripped and newline runs become ``"; "``.  Falls back to *step_name*, then
    to ``-``.
    """
    if not command:
        if not step_name:
            return "-"
        text = step_name
    else:
        text = command
        if text.startswith(_BASH_WRAPPER) and ";" in text:
            text = text[text.index(";") + 2 : -2]
    return _NEWLINES.sub("; ", text)


def status_change_message(workflow: str, status: str) -> str:
    """Return ``"<workflow> <verb> <status>"``.

    Raises:
        ReanaError: If *status* is not a known run status.
    """
    if status in ("finished", "failed"):
        verb = "has"
    elif status in ("created", "stopped", "queued", "deleted"):
        verb = "has been"
    elif status in ("running", "pending"):
        verb = "is"
    else:
        raise ReanaError(f"unrecognised status {status}")
    return f"{workflow} {verb} {status}"


def get_status(
    client: "ReanaClient",
    token: str,
    workflow: str,
    include_last_command: bool = False,
) -> "WorkflowStatus":
    """Fetch the current status payload of *workflow*.

    With *include_last_command* the progress ``current_command`` is replaced by
    its readable form (see :func:`get_last_command`); otherwise it is dropped.
    """
    status = client.get_workflow_status(token, workflow)
    progress = status.progress
    if include_last_command:
        if progress.current_command or progress.current_step_name:
            progress.current_command = get_last_command(
                progress.current_command, progress.current_step_name
            )
    else:
        progress.current_command = None
    return status


def update_status(
    client: "ReanaClient",
    token: str,
    workflow: str,
    status: str,
    *,
    workspace: bool = False,
    all_runs: bool = False,
) -> "StatusChange":
    """Request a status transition after checking it is one the server accepts."""
    if status not in UPDATE_STATUS_ACTIONS:
        raise ReanaError(f"invalid status '{status}', expected one of {UPDATE_STATUS_ACTIONS}")
    return client.set_workflow_status(
        token, workflow, status, all_runs=all_runs, workspace=workspace
    )
