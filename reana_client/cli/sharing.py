"""``share-add``, ``share-remove`` and ``share-status``: read-only workflow sharing."""

from __future__ import annotations

from typing import Callable, List, Optional, Tuple

import click
import structlog

from ..api.client import ReanaClient
from ..api.models import ShareStatus
from ..errors import APIError, SilentError
from ..utils.display import ERROR, INFO, SUCCESS, display_message
from ..utils.formatter import emit_table, format_table, parse_format_parameters
from ..utils.table import Table
from .options import access_token_option, api_command, format_option, json_option, workflow_option

log = structlog.get_logger()

__all__ = ["share_add", "share_remove", "share_status", "apply_to_users"]

SHARE_HEADER = ["user_email", "valid_until"]


def apply_to_users(
    users: Tuple[str, ...],
    action: Callable[[str], object],
    failure: str,
) -> Tuple[List[str], List[str]]:
    """Run *action* for every user and collect ``(succeeded, error_messages)``.

    *failure* is a format string receiving ``user`` and ``error``.
    """
    done: List[str] = []
    errors: List[str] = []
    for user in users:
        try:
            action(user)
        except APIError as exc:
            errors.append(failure.format(user=user, error=exc.format_message()))
        else:
            done.append(user)
    return done, errors


def _report_errors(errors: List[str]) -> None:
    for message in errors:
        display_message(message, ERROR, err=True)
    if errors:
        raise SilentError()


@click.command("share-add", short_help="Share a workflow with other users (read-only).")
@access_token_option
@workflow_option()
@click.option("-u", "--user", "users", multiple=True, required=True,
              help="Users to share the workflow with.")
@click.option("-m", "--message", default=None,
              help="Optional message that is sent to the user(s) with the sharing invitation.")
@click.option(
    "-v",
    "--valid-until",
    default=None,
    help=(
        "Optional date when access to the workflow will expire for the given "
        "user(s) (format: YYYY-MM-DD)."
    ),
)
@api_command()
def share_add(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    users: Tuple[str, ...],
    message: Optional[str],
    valid_until: Optional[str],
) -> None:
    """Share a workflow with other users (read-only).

    The ``share-add`` command allows sharing a workflow with other users. The
    users will be able to view the workflow but not modify it.

    \b
    Examples:
      $ reana-client share-add -w myanalysis.42 --user bob@cern.ch
      $ reana-client share-add -w myanalysis.42 --user bob@cern.ch
        --user cecile@cern.ch --message "Please review my analysis"
        --valid-until 2024-12-31
    """

    def share(user: str):
        log.info(f"Sharing workflow {workflow} with user {user}")
        return client.share_workflow(
            access_token, workflow, user, message=message, valid_until=valid_until
        )

    shared, errors = apply_to_users(
        users, share, f"Failed to share {workflow} with {{user}}: {{error}}"
    )
    if shared:
        display_message(f"{workflow} is now read-only shared with {', '.join(shared)}", SUCCESS)
    _report_errors(errors)


@click.command("share-remove", short_help="Unshare a workflow.")
@access_token_option
@workflow_option()
@click.option("-u", "--user", "users", multiple=True, required=True,
              help="Users to unshare the workflow with.")
@api_command()
def share_remove(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    users: Tuple[str, ...],
) -> None:
    """Unshare a workflow.

    The ``share-remove`` command allows for unsharing a workflow. The workflow
    will no longer be visible to the users with whom it was shared.

    \b
    Example:
      $ reana-client share-remove -w myanalysis.42 --user bob@example.org
    """

    def unshare(user: str):
        log.info(f"Unsharing workflow {workflow} with user {user}")
        return client.unshare_workflow(access_token, workflow, user)

    removed, errors = apply_to_users(
        users, unshare, f"Failed to unshare {workflow} with {{user}}: {{error}}"
    )
    if removed:
        display_message(f"{workflow} is no longer shared with {', '.join(removed)}", SUCCESS)
    _report_errors(errors)


def build_share_table(payload: ShareStatus) -> Table:
    rows = [[share.user_email, share.valid_until] for share in payload.shared_with]
    return Table(SHARE_HEADER, rows)


@click.command("share-status", short_help="Show with whom a workflow is shared.")
@access_token_option
@workflow_option()
@format_option(
    "Format output according to column titles or column values. Use "
    "<column_name>=<column_value> format."
)
@json_option
@api_command()
def share_status(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    format_: Tuple[str, ...],
    json_output: bool,
) -> None:
    """Show with whom a workflow is shared.

    The ``share-status`` command allows for checking with whom a workflow is
    shared.

    \b
    Example:
      $ reana-client share-status -w myanalysis.42
    """
    payload = client.get_workflow_share_status(access_token, workflow)
    if not payload.shared_with:
        display_message(f"Workflow {workflow} is not shared with anyone.", INFO)
        return

    table = format_table(build_share_table(payload), parse_format_parameters(format_, filter_rows=True))
    emit_table(table, json_output)
