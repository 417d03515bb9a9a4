"""Configuration commands: ``version``, ``ping`` and ``info``."""

from __future__ import annotations

from typing import Any, List, Optional

import click
import structlog

from reana_client import __version__

from ..api.client import ReanaClient
from ..api.models import Info, InfoItem, InfoListItem
from ..utils.display import display_json
from .options import access_token_option, api_command, json_option

log = structlog.get_logger()

# Display order of the ``info`` items.
_INFO_FIELDS: List[str] = [
    "compute_backends",
    "default_kubernetes_jobs_timeout",
    "default_kubernetes_memory_limit",
    "default_workspace",
    "kubernetes_max_memory_limit",
    "maximum_interactive_session_inactivity_period",
    "maximum_kubernetes_jobs_timeout",
    "maximum_workspace_retention_period",
    "workspaces_available",
]


@click.command("version", short_help="Show version.")
def version() -> None:
    """Show version.

    The ``version`` command shows REANA client version.
    """
    click.echo(__version__)


@click.command("ping", short_help="Check connection to REANA server.")
@access_token_option
@api_command()
def ping(client: ReanaClient, access_token: str) -> None:
    """Check connection to REANA server.

    The ``ping`` command allows to test connection to REANA server.
    """
    you = client.get_you(access_token)
    click.echo(f"REANA server: {client.server_url}")
    click.echo(f"REANA server version: {you.reana_server_version}")
    click.echo(f"REANA client version: {__version__}")
    click.echo(f"Authenticated as: <{you.email}>")
    click.echo("Status: Connected")


def _item_text(item: Any) -> str:
    if isinstance(item, InfoListItem):
        return ", ".join(item.value)
    value: Optional[Any] = item.value if isinstance(item, InfoItem) else None
    return "None" if value is None else str(value)


def info_lines(payload: Info) -> List[str]:
    """Return one ``title: value`` line per advertised item."""
    lines = []
    for field in _INFO_FIELDS:
        item = getattr(payload, field)
        if item is not None:
            lines.append(f"{item.title}: {_item_text(item)}")
    return lines


@click.command("info", short_help="List cluster general information.")
@access_token_option
@json_option
@api_command()
def info(client: ReanaClient, access_token: str, json_output: bool) -> None:
    """List cluster general information.

    The ``info`` command lists general information about the cluster.

    Lists all the available workspaces. It also returns the default workspace
    defined by the admin.
    """
    payload = client.info(access_token)
    if json_output:
        display_json(payload.model_dump(exclude_none=True))
        return
    for line in info_lines(payload):
        click.echo(line)


__all__ = ["version", "ping", "info", "info_lines"]
