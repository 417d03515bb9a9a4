"""``retention-rules-list``: show the workspace retention rules of a workflow."""

from __future__ import annotations

from typing import Tuple

import click

from ..api.client import ReanaClient
from ..api.models import RetentionRules
from ..utils.formatter import emit_table, format_table, parse_format_parameters
from ..utils.table import Table
from .options import access_token_option, api_command, format_option, json_option, workflow_option

__all__ = ["retention_rules_list", "build_retention_table"]

RETENTION_HEADER = ["workspace_files", "retention_days", "apply_on", "status"]


def build_retention_table(payload: RetentionRules) -> Table:
    """Tabulate the rules, shortest retention first."""
    rows = [
        [rule.workspace_files, rule.retention_days, rule.apply_on, rule.status]
        for rule in payload.retention_rules
    ]
    table = Table(RETENTION_HEADER, rows, {"retention_days": "int"})
    return table.sort("retention_days")


@click.command("retention-rules-list", short_help="List the retention rules for a workflow.")
@access_token_option
@workflow_option()
@json_option
@format_option(
    "Format output according to column titles or column values. Use "
    "<column_name>=<column_value> format. E.g. display pattern and status of "
    "active retention rules --format workspace_files,status=active."
)
@api_command()
def retention_rules_list(
    client: ReanaClient,
    access_token: str,
    workflow: str,
    json_output: bool,
    format_: Tuple[str, ...],
) -> None:
    """List the retention rules for a workflow.

    \b
    Example:
      $ reana-client retention-rules-list -w myanalysis.42
    """
    payload = client.get_workflow_retention_rules(access_token, workflow)
    table = format_table(
        build_retention_table(payload), parse_format_parameters(format_, filter_rows=True)
    )
    emit_table(table, json_output)
