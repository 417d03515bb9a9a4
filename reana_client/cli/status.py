"""``status``: show the status of one workflow run."""

from __future__ import annotations

from typing import Any, List, Tuple

import click

from ..api.client import ReanaClient
from ..api.models import Progress, WorkflowStatus
from ..utils.formatter import emit_table, format_table, parse_format_parameters
from ..utils.table import Table
from ..utils.workflows import get_duration, get_status, split_name
from .options import access_token_option, api_command, format_option, json_option, workflow_option

__all__ = ["status", "build_header", "build_table"]

_STARTED_STATUSES = ("running", "finished", "failed", "stopped")


def build_header(payload: WorkflowStatus, verbose: bool, include_duration: bool) -> List[str]:
    """Return the columns that make sense for the current run state."""
    progress = payload.progress
    header = ["name", "run_number", "created"]
    if payload.status in _STARTED_STATUSES and progress.run_started_at is not None:
        header.append("started")
        if progress.run_finished_at is not None:
            header.append("ended")
    header.append("status")
    if progress.total is not None:
        header.append("progress")
    if verbose:
        header += ["id", "user"]
        if progress.current_command is not None or progress.current_step_name is not None:
            header.append("command")
    if verbose or include_duration:
        header.append("duration")
    return header


def format_progress(progress: Progress) -> str:
    total = progress.total.total if progress.total is not None else None
    finished = progress.finished.total if progress.finished is not None else None
    if total:
        return f"{finished or 0}/{total}"
    return "-/-"


def _cell(column: str, payload: WorkflowStatus) -> Any:
    name, run_number = split_name(payload.name)
    progress = payload.progress
    values = {
        "name": name,
        "run_number": run_number,
        "created": payload.created,
        "status": payload.status,
        "id": payload.id,
        "user": payload.user,
        "started": progress.run_started_at,
        "ended": progress.run_finished_at,
        "command": progress.current_command,
    }
    if column == "progress":
        return format_progress(progress)
    if column == "duration":
        return get_duration(
            progress.run_started_at, progress.run_finished_at, progress.run_stopped_at
        )
    return values[column]


def build_table(payload: WorkflowStatus, header: List[str]) -> Table:
    return Table(header, [[_cell(c, payload) for c in header]], {"duration": "int"})


@click.command("status", short_help="Get status of a workflow.")
@access_token_option
@workflow_option()
@format_option("Format output by displaying only certain columns. E.g. --format name,status.")
@json_option
@click.option("-v", "--verbose", is_flag=True, help="Set status information verbosity.")
@click.option(
    "--include-duration",
    is_flag=True,
    help=(
        "Include the duration of the workflows in seconds. In case a workflow "
        "is in progress, its duration as of now will be shown."
    ),
)
@api_command()
def status(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    format_: Tuple[str, ...],
    json_output: bool,
    verbose: bool,
    include_duration: bool,
) -> None:
    """Get status of a workflow.

    The ``status`` command allow to retrieve status of a workflow. The status
    can be created, queued, running, failed, etc. You can increase verbosity or
    filter retrieved information by passing appropriate command-line options.

    \b
    Examples:
      $ reana-client status -w myanalysis.42
      $ reana-client status -w myanalysis.42 -v --json
    """
    payload = get_status(client, access_token, workflow, include_last_command=verbose)
    header = build_header(payload, verbose, include_duration)
    table = format_table(
        build_table(payload, header), parse_format_parameters(format_, filter_rows=False)
    )
    emit_table(table, json_output)
