"""
Shared Click options and the decorator that turns a handler into an API command.

Every command that talks to the server is written as::

    @click.command("status")
    @workflow_option()
    @access_token_option
    @api_command()
    def status(client, access_token, workflow, ...):
        ...

:func:`api_command` runs the checks the root command cannot do itself (it
only sees its own flags): access token, then server URL, then workflow name.
It logs the command and its explicitly set flags at DEBUG, builds the
:class:`~reana_client.api.client.ReanaClient` and passes it as the first
positional argument.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, Optional, Tuple

import click
import structlog
from click.core import ParameterSource

from ..api.client import ReanaClient
from ..config import ACCESS_TOKEN_ENV, WORKFLOW_ENV
from ..utils.filters import split_key_value
from ..utils.validator import validate_access_token, validate_server_url, validate_workflow

__all__ = [
    "access_token_option",
    "workflow_option",
    "json_option",
    "format_option",
    "filter_option",
    "page_option",
    "size_option",
    "api_command",
    "make_client",
    "parse_key_values",
]

log = structlog.get_logger()

_SECRET_PARAMS = {"access_token"}


# --------------------------------------------------------------------------- #
# Shared options                                                              #
# --------------------------------------------------------------------------- #
access_token_option = click.option(
    "-t",
    "--access-token",
    envvar=ACCESS_TOKEN_ENV,
    help="Access token of the current user.",
)

json_option = click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Get output in JSON format.",
)

page_option = click.option(
    "--page",
    type=click.IntRange(min=1),
    default=None,
    help="Results page number (to be used with --size).",
)

size_option = click.option(
    "--size",
    type=click.IntRange(min=1),
    default=None,
    help="Size of results per page (to be used with --page).",
)


def workflow_option(help_text: Optional[str] = None):
    """Return the ``-w/--workflow`` option, optionally with a custom help string."""
    return click.option(
        "-w",
        "--workflow",
        envvar=WORKFLOW_ENV,
        help=help_text
        or (
            "Name or UUID of the workflow. Overrides value of REANA_WORKON "
            "environment variable."
        ),
    )


def format_option(help_text: str):
    return click.option("--format", "format_", multiple=True, help=help_text)


def filter_option(help_text: str):
    return click.option("--filter", "filters", multiple=True, help=help_text)


def parse_key_values(ctx: click.Context, param: click.Parameter, values: Tuple[str, ...]) -> Dict[str, str]:
    """Click callback turning repeated ``KEY=VALUE`` values into a dict.

    Later occurrences of a key replace earlier ones.
    """
    parsed: Dict[str, str] = {}
    for item in values or ():
        try:
            key, value = split_key_value(item)
        except ValueError as exc:
            raise click.BadParameter(str(exc), ctx=ctx, param=param) from None
        parsed[key] = value
    return parsed


# --------------------------------------------------------------------------- #
# Command wrapper                                                             #
# --------------------------------------------------------------------------- #
def make_client(settings: Dict[str, Any]) -> ReanaClient:
    """Build the transport from the settings stored by the root command."""
    return ReanaClient(settings["server_url"], verify_tls=settings.get("verify_tls", False))


def _log_command_flags(ctx: click.Context) -> None:
    log.debug(f"command: {ctx.info_name}")
    for name, value in ctx.params.items():
        if ctx.get_parameter_source(name) is not ParameterSource.COMMANDLINE:
            continue
        shown = "***" if name in _SECRET_PARAMS and value else value
        log.debug(f"{name}: {shown}")


def api_command(workflow_optional: bool = False) -> Callable:
    """Validate the connection flags and inject a :class:`ReanaClient`.

    Args:
        workflow_optional: Do not require ``--workflow`` even when the command
            declares it (``list`` filters on it only when given).
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        @click.pass_context
        def wrapper(ctx: click.Context, *args: Any, **kwargs: Any) -> Any:
            settings = dict(ctx.obj or {})
            validate_access_token(kwargs.get("access_token"))
            validate_server_url(settings.get("server_url"))
            if "workflow" in kwargs and not workflow_optional:
                validate_workflow(kwargs.get("workflow"))
            _log_command_flags(ctx)

            return func(make_client(settings), *args, **kwargs)

        return wrapper

    return decorator
