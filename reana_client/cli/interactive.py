"""``open`` and ``close``: interactive sessions on top of a workspace."""

from __future__ import annotations

from typing import Optional

import click
import structlog

from ..api.client import ReanaClient
from ..api.models import Info
from ..config import INTERACTIVE_SESSION_TYPES
from ..errors import APIError
from ..utils.display import SUCCESS, display_message, print_colorable
from ..utils.formatter import format_session_uri
from ..utils.validator import validate_choice
from .options import access_token_option, api_command, workflow_option

log = structlog.get_logger()

__all__ = ["open_session", "close_session", "inactivity_notice"]


def inactivity_notice(info: Info) -> Optional[str]:
    """Return the auto-close warning when the cluster advertises a period."""
    period = info.maximum_interactive_session_inactivity_period
    if period is None or period.value in (None, ""):
        return None
    return f"Please note that it will be automatically closed after {period.value} days of inactivity."


@click.command("open", short_help="Open an interactive session inside the workspace.")
@access_token_option
@workflow_option()
@click.option(
    "-i",
    "--image",
    default=None,
    help=(
        "Docker image which will be used to spawn the interactive session. "
        "Overrides the default image for the selected type."
    ),
)
@click.argument("session_type", default=INTERACTIVE_SESSION_TYPES[0], required=False)
@api_command()
def open_session(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    image: Optional[str],
    session_type: str,
) -> None:
    """Open an interactive session inside the workspace.

    The ``open`` command allows to open interactive session processes on top
    of the workflow workspace, such as Jupyter notebooks. This is useful to
    quickly inspect and analyse the produced files while the workflow is
    still running.

    \b
    Examples:
      $ reana-client open -w myanalysis.42 jupyter
    """
    validate_choice(session_type, INTERACTIVE_SESSION_TYPES, "interactive-session-type")

    log.info(f"Opening an interactive session on {workflow}")
    payload = client.open_interactive_session(access_token, workflow, session_type, image=image)

    display_message("Interactive session opened successfully", SUCCESS)
    print_colorable(format_session_uri(client.server_url, payload.path, access_token), "green")
    click.echo("It could take several minutes to start the interactive session.")

    try:
        notice = inactivity_notice(client.info(access_token))
    except APIError as exc:
        log.warning(f"cluster information could not be retrieved: {exc.format_message()}")
        notice = None
    if notice:
        click.echo(notice)


@click.command("close", short_help="Close an interactive session.")
@access_token_option
@workflow_option()
@api_command()
def close_session(client: ReanaClient, access_token: str, workflow: str) -> None:
    """Close an interactive session.

    The ``close`` command allows to shut down any interactive sessions that
    you may have running. You would typically use this command after you
    finished exploring data in the Jupyter notebook and after you have
    transferred any code created in your interactive session.

    \b
    Examples:
      $ reana-client close -w myanalysis.42
    """
    client.close_interactive_session(access_token, workflow)
    display_message(
        f"Interactive session for workflow {workflow} was successfully closed", SUCCESS
    )
