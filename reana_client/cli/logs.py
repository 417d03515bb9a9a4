"""``logs``: print the engine and job logs of a workflow, or follow them live."""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import click
import structlog

from ..api.client import ReanaClient
from ..api.models import JobLog, LogBundle
from ..config import (
    COMPUTE_BACKENDS,
    FOLLOW_INTERVAL,
    LOGS_MULTI_FILTERS,
    LOGS_SINGLE_FILTERS,
    get_run_statuses,
)
from ..errors import FilterError
from ..utils.display import (
    ERROR,
    INFO,
    JOB_STATUS_COLORS,
    WARNING,
    display_json,
    display_message,
    print_colorable,
)
from ..utils.filters import Filters
from ..utils.follow import LogFollower
from .options import (
    access_token_option,
    api_command,
    filter_option,
    json_option,
    page_option,
    size_option,
    workflow_option,
)

log = structlog.get_logger()

__all__ = ["logs", "parse_logs_filters", "filter_job_logs", "display_human_logs"]


def parse_logs_filters(inputs: Sequence[str]) -> Filters:
    """Parse and validate the ``--filter`` values of ``logs``.

    ``compute_backend`` is matched case-insensitively against the known
    backends and ``status`` against the run statuses.
    """
    filters = Filters(LOGS_SINGLE_FILTERS, LOGS_MULTI_FILTERS, inputs)
    backend = filters.get_single("compute_backend")
    if backend and backend.lower() not in COMPUTE_BACKENDS:
        raise FilterError(f"compute_backend value {backend} is not valid")
    filters.validate_values("status", get_run_statuses(True))
    return filters


def filter_job_logs(job_logs: Dict[str, JobLog], filters: Filters) -> Dict[str, JobLog]:
    """Keep the job logs matching every single-value filter that is set."""
    wanted: Dict[str, str] = {}
    for key in LOGS_SINGLE_FILTERS:
        value = filters.get_single(key)
        if not value:
            continue
        if key == "compute_backend":
            value = COMPUTE_BACKENDS[value.lower()]
        wanted[key] = value

    return {
        job_id: job
        for job_id, job in job_logs.items()
        if all(getattr(job, key) == value for key, value in wanted.items())
    }


def _optional_item(title: str, value: Optional[str], fg: Optional[str] = None) -> None:
    if value:
        click.echo(f"==> {title}: ", nl=False)
        print_colorable(value, fg)


def display_human_logs(bundle: LogBundle, steps: List[str]) -> None:
    """Print the logs bundle section by section."""
    if bundle.workflow_logs:
        display_message("Workflow engine logs", INFO)
        click.echo(bundle.workflow_logs)

    if bundle.engine_specific:
        click.echo()
        display_message("Engine internal logs", INFO)
        click.echo(bundle.engine_specific)

    if steps:
        returned = {job.job_name for job in bundle.job_logs.values()}
        missing = [step for step in steps if step not in returned]
        if missing:
            display_message(
                f"The logs of step(s) {','.join(missing)} were not found, "
                "check for spelling mistakes in the step names",
                ERROR,
                err=True,
            )

    if not bundle.job_logs:
        return
    click.echo()
    display_message("Job logs", INFO)
    for job_id, job in bundle.job_logs.items():
        name = job.job_name or job_id
        click.echo(f"==> Step: {name}")
        _optional_item("Workflow ID", job.workflow_uuid)
        _optional_item("Compute backend", job.compute_backend)
        _optional_item("Job ID", job.backend_job_id)
        _optional_item("Docker image", job.docker_img)
        _optional_item("Command", job.cmd)
        _optional_item("Status", job.status, JOB_STATUS_COLORS.get(job.status or ""))
        _optional_item("Started", job.started_at)
        _optional_item("Finished", job.finished_at)
        if job.logs:
            click.echo("==> Logs:")
            click.echo(job.logs)
        else:
            click.echo(f"Step {name} emitted no logs.")


@click.command("logs", short_help="Get workflow logs.")
@access_token_option
@workflow_option()
@json_option
@filter_option(
    "Filter job logs to include only those steps that match certain filtering "
    "criteria. Use --filter name=value pairs. Available filters are "
    "compute_backend, docker_img, status and step."
)
@page_option
@size_option
@click.option(
    "--follow",
    is_flag=True,
    help="Follow the logs of a running workflow or job (similar to tail -f).",
)
@click.option(
    "-i",
    "--interval",
    type=int,
    default=FOLLOW_INTERVAL,
    show_default=True,
    help="Sleep time in seconds between log polling if log following is enabled.",
)
@api_command()
def logs(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    json_output: bool,
    filters: Tuple[str, ...],
    page: Optional[int],
    size: Optional[int],
    follow: bool,
    interval: int,
) -> None:
    """Get workflow logs.

    The ``logs`` command allows to retrieve logs of running workflow. Note that
    only finished steps of the workflow are returned, the logs of the currently
    processed step is not returned until it is finished.

    \b
    Examples:
      $ reana-client logs -w myanalysis.42
      $ reana-client logs -w myanalysis.42 --filter step=1st_step
      $ reana-client logs -w myanalysis.42 --follow --filter step=1st_step
    """
    parsed = parse_logs_filters(filters)
    steps = parsed.get_multi("step")

    if follow:
        if len(steps) > 1:
            display_message(
                "only one step can be followed at a time, ignoring additional steps",
                WARNING,
                err=True,
            )
        LogFollower(
            client,
            access_token,
            workflow,
            step=steps[0] if steps else None,
            interval=interval,
        ).run()
        return

    payload = client.get_workflow_logs(
        access_token, workflow, steps=steps, page=page or 1, size=size
    )
    bundle = payload.bundle()
    bundle.job_logs = filter_job_logs(bundle.job_logs, parsed)
    log.debug("logs received", workflow=workflow, jobs=len(bundle.job_logs))

    if json_output:
        display_json(bundle.model_dump())
    else:
        display_human_logs(bundle, steps)
