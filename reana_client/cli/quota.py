"""``quota-show``: display the quota usage of the authenticated user."""

from __future__ import annotations

from typing import Optional

import click
import structlog

from ..api.client import ReanaClient
from ..api.models import QuotaResource, QuotaStat
from ..config import QUOTA_REPORTS
from ..errors import ValidationError
from ..utils.display import RESOURCE_HEALTH_COLORS, print_colorable
from ..utils.validator import validate_at_least_one, validate_choice
from .options import access_token_option, api_command

log = structlog.get_logger()

__all__ = ["quota_show", "usage_message"]


def usage_message(resource: QuotaResource, human_readable: bool) -> "tuple[str, Optional[str]]":
    """Return ``(text, colour)`` for the ``usage out of limit (pct)`` line.

    The health colour is used only when the resource has a limit and the
    server reported a health value.
    """
    usage = resource.stats.get("usage") or QuotaStat()
    limit = resource.stats.get("limit") or QuotaStat()

    colour = None
    if limit.raw > 0:
        percentage = f"{usage.raw / limit.raw * 100:.0f}%"
        limit_text = limit.human_readable if human_readable else f"{limit.raw:.0f}"
        limit_info = f"out of {limit_text} used ({percentage})"
        if resource.health:
            colour = RESOURCE_HEALTH_COLORS.get(resource.health)
    else:
        limit_info = "used"

    usage_text = usage.human_readable if human_readable else f"{usage.raw:.0f}"
    return f"{usage_text} {limit_info}", colour


@click.command("quota-show", short_help="Show user quota.")
@access_token_option
@click.option("--report", default=None, help="Specify quota report type. e.g. limit, usage.")
@click.option("--resource", default="", help="Specify quota resource. e.g. disk, memory.")
@click.option("--resources", "show_resources", is_flag=True, help="Print available resources.")
@click.option(
    "-h",
    "--human-readable",
    is_flag=True,
    help="Show disk size in human readable format.",
)
@api_command()
def quota_show(
    client: ReanaClient,
    access_token: str,
    report: Optional[str],
    resource: str,
    show_resources: bool,
    human_readable: bool,
) -> None:
    """Show user quota.

    The ``quota-show`` command displays quota usage for the user.

    \b
    Examples:
      $ reana-client quota-show --resource disk --report limit
      $ reana-client quota-show --resource disk --report usage
      $ reana-client quota-show --resource disk
      $ reana-client quota-show --resources
    """
    try:
        validate_at_least_one({"resource": resource, "resources": show_resources})
    except ValidationError as exc:
        raise click.UsageError(exc.format_message()) from None
    if report is not None:
        validate_choice(report, QUOTA_REPORTS, "report")

    quota = client.get_you(access_token).quota
    available = list(quota.keys())

    if show_resources:
        click.echo("\n".join(available))
        return

    selected = quota.get(resource)
    if selected is None:
        names = "', '".join(available)
        raise ValidationError(
            f"resource '{resource}' is not valid\nAvailable resources are '{names}'"
        )

    if report is None:
        text, colour = usage_message(selected, human_readable)
        print_colorable(text, colour)
        return

    stat = selected.stats.get(report)
    if stat is None or stat.raw <= 0:
        click.echo(f"No {report}.")
    elif human_readable:
        click.echo(stat.human_readable)
    else:
        click.echo(f"{stat.raw:.0f}")
