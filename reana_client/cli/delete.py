"""``delete``: remove a workflow run, or every run of a workflow."""

from __future__ import annotations

import click

from ..api.client import ReanaClient
from ..utils.display import SUCCESS, display_message
from ..utils.workflows import split_name, status_change_message, update_status
from .options import access_token_option, api_command, workflow_option

__all__ = ["delete"]


@click.command("delete", short_help="Delete a workflow.")
@access_token_option
@workflow_option()
@click.option(
    "--include-workspace/--no-include-workspace",
    default=True,
    show_default=True,
    help="Delete workspace from REANA.",
)
@click.option("--include-all-runs", is_flag=True, help="Delete all runs of a given workflow.")
@api_command()
def delete(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    include_workspace: bool,
    include_all_runs: bool,
) -> None:
    """Delete a workflow.

    The ``delete`` command removes workflow run(s) from the database. Note
    that the workspace will always be deleted, even when
    ``--include-workspace`` is not specified. Note also that you can remove
    all past runs of a workflow by specifying ``--include-all-runs`` flag.

    \b
    Examples:
      $ reana-client delete -w myanalysis.42
      $ reana-client delete -w myanalysis.42 --include-all-runs
    """
    update_status(
        client,
        access_token,
        workflow,
        "deleted",
        workspace=include_workspace,
        all_runs=include_all_runs,
    )

    if include_all_runs:
        name, _ = split_name(workflow)
        message = f"All workflows named '{name}' have been deleted"
    else:
        message = status_change_message(workflow, "deleted")
    display_message(message, SUCCESS)
