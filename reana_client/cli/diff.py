"""``diff``: compare the specifications and workspaces of two workflows."""

from __future__ import annotations

from typing import Iterable

import click

from ..api.client import ReanaClient
from ..api.models import WorkflowDiff
from ..config import LEADING_MARK
from ..errors import ReanaError
from ..utils.display import print_colorable
from .options import access_token_option, api_command

__all__ = ["diff", "line_color", "display_diff"]

_LINE_COLORS = {"@": "cyan", "-": "red", "+": "green"}


def line_color(line: str):
    """Return the colour of a unified-diff *line*, ``None`` for context lines."""
    return _LINE_COLORS.get(line[:1])


def print_diff(lines: Iterable[str]) -> None:
    for line in lines:
        print_colorable(line, line_color(line))


def _section_title(text: str) -> None:
    print_colorable(f"{LEADING_MARK} {text}", "yellow", bold=True)


def display_diff(payload: WorkflowDiff) -> None:
    """Print the specification diff section by section, then the workspace diff."""
    if payload.reana_specification:
        try:
            sections = payload.specification_sections()
        except ValueError as exc:
            raise ReanaError(str(exc)) from exc

        equal = True
        for section, lines in sections.items():
            if not lines:
                continue
            equal = False
            _section_title(f"Differences in workflow {section}")
            print_diff(lines)
        if equal:
            _section_title("No differences in REANA specifications.")
        click.echo()

    try:
        workspace = payload.workspace_lines()
    except ValueError as exc:
        raise ReanaError(str(exc)) from exc
    if workspace:
        _section_title("Differences in workflow workspace")
        print_diff(workspace)


@click.command("diff", short_help="Show diff between two workflows.")
@access_token_option
@click.option(
    "-q",
    "--brief",
    is_flag=True,
    help="If not set, differences in the contents of the files in the two workspaces are shown.",
)
@click.option(
    "-u",
    "--unified",
    "context_lines",
    type=int,
    default=5,
    show_default=True,
    help="Sets number of context lines for workspace diff output.",
)
@click.argument("workflow_a")
@click.argument("workflow_b")
@api_command()
def diff(
    client: ReanaClient,
    access_token: str,
    brief: bool,
    context_lines: int,
    workflow_a: str,
    workflow_b: str,
) -> None:
    """Show diff between two workflows.

    The ``diff`` command allows to compare two workflows, the workflow_a and
    workflow_b, which must be provided as arguments. The output will show the
    difference in workflow run parameters, the generated files, the logs, etc.

    \b
    Examples:
      $ reana-client diff myanalysis.42 myotheranalysis.43
      $ reana-client diff myanalysis.42 myotheranalysis.43 --brief
    """
    payload = client.get_workflow_diff(
        access_token, workflow_a, workflow_b, brief=brief, context_lines=context_lines
    )
    display_diff(payload)
