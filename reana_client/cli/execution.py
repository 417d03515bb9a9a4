"""``start``, ``restart`` and ``stop``: drive the execution of a workflow run."""

from __future__ import annotations

from typing import Dict, Tuple

import click
import structlog

from ..api.client import ReanaClient
from ..errors import ReanaError, ValidationError
from ..utils.display import SUCCESS, WARNING, display_message
from ..utils.follow import follow_workflow
from ..utils.validator import validate_file, validate_input_parameters, validate_operational_options
from ..utils.workflows import status_change_message, update_status
from .files import display_file_urls
from .options import access_token_option, api_command, parse_key_values, workflow_option

log = structlog.get_logger()

__all__ = ["start", "restart", "stop", "validate_start_inputs"]

_PARAMETER_HELP = (
    "Additional input parameters to override original ones from reana.yaml. "
    "E.g. -p myparam1=myval1 -p myparam2=myval2."
)
_OPTION_HELP = (
    "Additional operational options for the workflow execution. "
    "E.g. CACHE=off. (workflow engine - serial) "
    "E.g. --debug (workflow engine - cwl)"
)

_ACCEPTED_RESTART_STATUSES = ("pending", "queued", "running")


def parameter_options(func):
    """Attach the repeatable ``-p/--parameter`` and ``-o/--option`` flags."""
    func = click.option(
        "-o", "--option", "options", multiple=True, callback=parse_key_values, help=_OPTION_HELP
    )(func)
    func = click.option(
        "-p",
        "--parameter",
        "parameters",
        multiple=True,
        callback=parse_key_values,
        help=_PARAMETER_HELP,
    )(func)
    return func


def validate_start_inputs(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    parameters: Dict[str, str],
    options: Dict[str, str],
) -> Tuple[Dict[str, str], Dict[str, str]]:
    """Check the user parameters and options against the stored workflow.

    Unknown operational options abort the command.  Unknown input
    parameters are reported and dropped.

    Returns:
        ``(parameters, options)`` ready to be sent, options translated to
        the keys of the workflow engine.
    """
    stored = client.get_workflow_parameters(access_token, workflow)
    translated = validate_operational_options(stored.type, options)
    kept, warnings = validate_input_parameters(parameters, stored.parameters)
    for warning in warnings:
        display_message(warning, WARNING)
    return kept, translated


def _submit(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    parameters: Dict[str, str],
    options: Dict[str, str],
    restart: bool = False,
) -> str:
    if parameters or options:
        parameters, options = validate_start_inputs(
            client, access_token, workflow, parameters, options
        )
    log.debug("starting workflow", workflow=workflow, restart=restart)
    response = client.start_workflow(
        access_token,
        workflow,
        input_parameters=parameters,
        operational_options=options,
        restart=restart,
    )
    return response.status


@click.command("start", short_help="Start previously created workflow.")
@access_token_option
@workflow_option()
@parameter_options
@click.option(
    "--follow",
    is_flag=True,
    help="If set, follows the execution of the workflow until termination.",
)
@api_command()
def start(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    parameters: Dict[str, str],
    options: Dict[str, str],
    follow: bool,
) -> None:
    """Start previously created workflow.

    The ``start`` command allows to start previously created workflow. The
    workflow execution can be further influenced by passing input parameters
    using ``-p`` or ``--parameter`` flag and by setting additional operational
    options using ``-o`` or ``--option``. The input parameters and operational
    options can be repetitive. For example, to disable caching for the Serial
    workflow engine, you can set ``-o CACHE=off``.

    \b
    Examples:
      $ reana-client start -w myanalysis.42 -p sleeptime=10 -p myparam=4
      $ reana-client start -w myanalysis.42 -p myparam1=myvalue1 -o CACHE=off
    """
    status = _submit(client, access_token, workflow, parameters, options)
    display_message(status_change_message(workflow, status), SUCCESS)

    if follow:
        follow_workflow(
            client,
            access_token,
            workflow,
            status,
            on_finished=lambda: display_file_urls(client, access_token, workflow),
        )


@click.command("restart", short_help="Restart previously run workflow.")
@access_token_option
@workflow_option()
@parameter_options
@click.option(
    "-f",
    "--file",
    "spec_file",
    default="reana.yaml",
    show_default=True,
    help="REANA specification file describing the workflow to execute.",
)
@api_command()
def restart(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    parameters: Dict[str, str],
    options: Dict[str, str],
    spec_file: str,
) -> None:
    """Restart previously run workflow.

    The ``restart`` command allows to restart a previous workflow on the same
    workspace.

    Note that workflow restarting can be used in a combination with
    operational options ``FROM`` and ``TARGET``. You can also pass a modified
    workflow specification with ``-f`` or ``--file`` flag.

    \b
    Examples:
      $ reana-client restart -w myanalysis.42 -p sleeptime=10 -p myparam=4
      $ reana-client restart -w myanalysis.42 -o TARGET=gendata
      $ reana-client restart -w myanalysis.42 -o FROM=fitdata
    """
    try:
        validate_file(spec_file)
    except ValidationError as exc:
        raise ValidationError(
            f"invalid value for '--file': {exc.format_message()}"
        ) from None

    status = _submit(client, access_token, workflow, parameters, options, restart=True)
    message = status_change_message(workflow, status)
    if status not in _ACCEPTED_RESTART_STATUSES:
        raise ReanaError(message)
    display_message(message, SUCCESS)


@click.command("stop", short_help="Stop a running workflow.")
@access_token_option
@workflow_option()
@click.option(
    "--force",
    "force_stop",
    is_flag=True,
    help="Stop a workflow without waiting for jobs to finish.",
)
@api_command()
def stop(client: ReanaClient, access_token: str, workflow: str, force_stop: bool) -> None:
    """Stop a running workflow.

    The ``stop`` command allows to hard-stop the running workflow process.
    Note that soft-stopping of the workflow is currently not supported. This
    command should be therefore used with care, only if you are absolutely
    sure that there is no point in continuing the running the workflow.

    \b
    Example:
      $ reana-client stop -w myanalysis.42 --force
    """
    if not force_stop:
        raise ReanaError(
            "graceful stop not implemented yet. If you really want to stop your "
            "workflow without waiting for jobs to finish use: --force option"
        )

    log.info(f"Sending a request to stop workflow {workflow}")
    update_status(client, access_token, workflow, "stop")
    display_message(status_change_message(workflow, "stopped"), SUCCESS)

