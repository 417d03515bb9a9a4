"""``list``: list workflows or open interactive sessions."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import click
import structlog

from ..api.client import ReanaClient
from ..api.models import JobCount, Workflow
from ..config import LIST_MULTI_FILTERS, get_run_statuses
from ..errors import SortError
from ..utils.display import WARNING, display_message
from ..utils.filters import Filters
from ..utils.formatter import emit_table, format_session_uri, format_table, parse_format_parameters, sort_table
from ..utils.table import Table
from ..utils.workflows import get_duration, split_name
from .options import (
    access_token_option,
    api_command,
    filter_option,
    format_option,
    json_option,
    page_option,
    size_option,
    workflow_option,
)

log = structlog.get_logger()

__all__ = ["list_workflows", "build_header", "build_table", "parse_list_filters"]

_HEADERS: Dict[str, List[str]] = {
    "batch": ["name", "run_number", "created", "started", "ended", "status"],
    "interactive": [
        "name",
        "run_number",
        "created",
        "session_type",
        "session_uri",
        "session_status",
    ],
}


def build_header(
    run_type: str,
    verbose: bool = False,
    include_workspace_size: bool = False,
    include_progress: bool = False,
    include_duration: bool = False,
) -> List[str]:
    """Return the columns shown for *run_type* and the selected extras."""
    header = list(_HEADERS[run_type])
    if verbose:
        header += ["id", "user"]
    if verbose or include_workspace_size:
        header.append("size")
    if verbose or include_progress:
        header.append("progress")
    if verbose or include_duration:
        header.append("duration")
    return header


def parse_list_filters(
    inputs: Sequence[str], show_deleted_runs: bool, show_all: bool
) -> Tuple[List[str], str]:
    """Return ``(status_filters, search)`` for the ``--filter`` values.

    Without user ``status`` filters every status is requested, ``deleted``
    only with ``--show-deleted-runs`` or ``--all``.
    """
    filters = Filters(multi_keys=LIST_MULTI_FILTERS, inputs=inputs)
    filters.validate_values("status", get_run_statuses(True))

    statuses = filters.get_multi("status") or get_run_statuses(show_deleted_runs or show_all)
    search = filters.get_json([k for k in LIST_MULTI_FILTERS if k != "status"])
    return statuses, search


def _progress_count(count: Optional[JobCount]) -> str:
    total = count.total if count is not None else None
    return str(total) if total else "-"


def _cell(
    column: str,
    workflow: Workflow,
    human_readable: bool,
    server_url: str,
    token: str,
) -> Any:
    name, run_number = split_name(workflow.name)
    progress = workflow.progress
    if column == "name":
        return name
    if column == "run_number":
        return run_number
    if column == "size":
        if human_readable:
            return workflow.size.human_readable
        return None if workflow.size.raw is None else int(workflow.size.raw)
    if column == "progress":
        return f"{_progress_count(progress.finished)}/{_progress_count(progress.total)}"
    if column == "duration":
        return get_duration(
            progress.run_started_at, progress.run_finished_at, progress.run_stopped_at
        )
    if column == "started":
        return progress.run_started_at or None
    if column == "ended":
        return progress.run_finished_at or None
    if column == "session_uri":
        if not workflow.session_uri:
            return None
        return format_session_uri(server_url, workflow.session_uri, token)
    return getattr(workflow, column) or None


def build_table(
    items: Sequence[Workflow],
    header: Sequence[str],
    human_readable: bool,
    server_url: str,
    token: str,
) -> Table:
    """Project the workflow payloads onto *header*."""
    kinds = {"duration": "int"}
    if not human_readable:
        kinds["size"] = "int"
    rows = [[_cell(c, w, human_readable, server_url, token) for c in header] for w in items]
    return Table(header, rows, kinds)


@click.command("list", short_help="List all workflows and sessions.")
@access_token_option
@workflow_option(help_text="List all runs of the given workflow.")
@click.option("-s", "--sessions", is_flag=True, help="List all open interactive sessions.")
@format_option(
    "Format output according to column titles or column values. Use "
    "<column_name>=<column_value> format. E.g. display workflow with failed "
    "status and named test_workflow --format status=failed,name=test_workflow."
)
@json_option
@click.option("--all", "show_all", is_flag=True, help="Show all workflows including deleted ones.")
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Print out extra information: workflow id, user id, disk usage, progress, duration.",
)
@click.option(
    "-h",
    "--human-readable",
    is_flag=True,
    help="Show disk size in human readable format.",
)
@click.option("--sort", "sort_column", default="CREATED", show_default=True,
              help="Sort the output by specified column.")
@filter_option(
    "Filter workflow that contains certain filtering criteria. Use --filter "
    "<column_name>=<column_value> pairs. Available filters are 'name' and 'status'."
)
@click.option(
    "--include-duration",
    is_flag=True,
    help=(
        "Include the duration of the workflows in seconds. In case a workflow "
        "is in progress, its duration as of now will be shown."
    ),
)
@click.option("--include-progress", is_flag=True, default=None,
              help="Include progress information of the workflows.")
@click.option("--include-workspace-size", is_flag=True, default=None,
              help="Include size information of the workspace.")
@click.option("--show-deleted-runs", is_flag=True, help="Include deleted workflows in the output.")
@page_option
@size_option
@api_command(workflow_optional=True)
def list_workflows(
    client: ReanaClient,
    access_token: str,
    workflow: Optional[str],
    sessions: bool,
    format_: Tuple[str, ...],
    json_output: bool,
    show_all: bool,
    verbose: bool,
    human_readable: bool,
    sort_column: str,
    filters: Tuple[str, ...],
    include_duration: bool,
    include_progress: Optional[bool],
    include_workspace_size: Optional[bool],
    show_deleted_runs: bool,
    page: Optional[int],
    size: Optional[int],
) -> None:
    """List all workflows and sessions.

    The ``list`` command lists workflows and sessions. By default, the list of
    workflows is returned. If you would like to see the list of your open
    interactive sessions, you need to pass the ``--sessions`` command-line
    option.

    \b
    Examples:
      $ reana-client list --all
      $ reana-client list --sessions
      $ reana-client list --verbose --human-readable
    """
    run_type = "interactive" if sessions else "batch"
    statuses, search = parse_list_filters(filters, show_deleted_runs, show_all)

    payload = client.get_workflows(
        access_token,
        run_type=run_type,
        verbose=verbose,
        page=page or 1,
        size=size,
        workflow=workflow,
        status=statuses,
        search=search,
        include_progress=include_progress,
        include_workspace_size=include_workspace_size,
    )
    log.debug("workflows received", count=len(payload.items), total=payload.total)

    header = build_header(
        run_type,
        verbose,
        bool(include_workspace_size),
        bool(include_progress),
        include_duration,
    )
    table = build_table(payload.items, header, human_readable, client.server_url, access_token)

    size_map = None
    if human_readable:
        size_map = {
            w.size.human_readable: w.size.raw
            for w in payload.items
            if w.size.human_readable and w.size.raw is not None
        }
    try:
        table = sort_table(table, sort_column, reverse=True, size_map=size_map)
    except SortError as exc:
        display_message(f"sort operation was aborted, {exc}", WARNING, err=True)

    table = format_table(table, parse_format_parameters(format_, filter_rows=True))
    emit_table(table, json_output)
