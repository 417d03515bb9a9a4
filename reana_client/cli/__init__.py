"""Expose the project-wide Click group for the ``reana-client`` script.

The module:

* declares a single Click *group* called :pyfunc:`main`;
* wires the global flags (log level, server URL, TLS verification, profiling);
* sets up logging via :pyfunc:`reana_client.utils.logging.setup_logging`;
* registers every sub-command lazily, grouped by topic for ``--help``.

Per-command validation of the access token, server URL and workflow happens
in :mod:`reana_client.cli.options`, once the sub-command's own flags are
parsed.
"""

from __future__ import annotations

import importlib
from typing import Any, Dict, List, Optional, Tuple

import click
import structlog

from reana_client import __version__
from reana_client.cli.completion import PowerShellComplete  # noqa: F401  registers the shell
from reana_client.config import (
    LOG_LEVELS,
    PROFILE_MODES,
    SERVER_URL_ENV,
    VERIFY_TLS_ENV,
    verify_tls_from_env,
)
from reana_client.utils.logging import setup_logging
from reana_client.utils.profiling import Profiler
from reana_client.utils.validator import validate_choice

log = structlog.get_logger()


class LazyGroup(click.Group):
    """Click group that imports sub-commands lazily and lists them by section."""

    def __init__(self, *args, **kwargs):
        """Initialise the base class and prepare the lazy registry."""
        self._lazy: Dict[str, str] = {}
        self._sections: List[Tuple[str, List[str]]] = []
        super().__init__(*args, **kwargs)

    def set_lazy_command(self, name: str, target: str, section: str) -> None:
        """Register *name* to be imported from ``target`` on first use."""
        self._lazy[name] = target
        for title, names in self._sections:
            if title == section:
                names.append(name)
                break
        else:
            self._sections.append((section, [name]))

    def list_commands(self, ctx):  # noqa: D401 - Click signature
        """Return eager and lazy command names in registration order."""
        names = list(super().list_commands(ctx))
        names.extend(n for n in self._lazy if n not in names)
        return names

    def get_command(self, ctx, cmd_name):  # noqa: D401 - Click signature
        """Resolve *cmd_name* from the eager map or import table."""
        cmd = super().get_command(ctx, cmd_name)
        if cmd is not None:
            return cmd
        target = self._lazy.get(cmd_name)
        if not target:
            return None
        module_name, attr = target.split(":", 1)
        module = importlib.import_module(module_name)
        cmd = getattr(module, attr)
        self.add_command(cmd, name=cmd_name)
        return cmd

    def format_commands(self, ctx, formatter):  # noqa: D401 - Click signature
        """Write one help section per command group."""
        for title, names in self._sections:
            rows = []
            for name in names:
                cmd = self.get_command(ctx, name)
                if cmd is None or cmd.hidden:
                    continue
                rows.append((name, cmd.get_short_help_str(limit=formatter.width)))
            if rows:
                with formatter.section(title):
                    formatter.write_dl(rows)


# ─────────────────────────────────────────────────────────────────────────────
# Context settings shared by the entire Click hierarchy
# ─────────────────────────────────────────────────────────────────────────────
_CTX: Dict[str, Any] = dict(
    help_option_names=["-h", "--help"],
    max_content_width=120,
)


@click.group(
    cls=LazyGroup,
    context_settings=_CTX,
    help="REANA client for interacting with REANA server.",
)
@click.version_option(__version__, "--version", prog_name="reana-client")
@click.option(
    "-l",
    "--loglevel",
    default="WARNING",
    show_default=True,
    help="Sets log level [DEBUG|INFO|WARNING]",
)
@click.option(
    "--server-url",
    envvar=SERVER_URL_ENV,
    help=f"REANA server URL (or ${SERVER_URL_ENV}).",
)
@click.option(
    "--verify-tls/--no-verify-tls",
    default=None,
    help=(
        "Verify the server TLS certificate.  Verification is OFF by default "
        f"because clusters commonly use self-signed certificates (or ${VERIFY_TLS_ENV})."
    ),
)
@click.option(
    "--profile",
    default="none",
    show_default=True,
    help="Enable profiling. One of (none|cpu|heap)",
)
@click.pass_context
def main(
    ctx: click.Context,
    loglevel: str,
    server_url: Optional[str],
    verify_tls: Optional[bool],
    profile: str,
) -> None:
    """Root command executed by *reana-client*.

    Args:
        ctx: Click runtime context that carries objects across sub-commands.
        loglevel: ``DEBUG``, ``INFO`` or ``WARNING`` (case-insensitive).
        server_url: Server URL from ``--server-url`` or ``$REANA_SERVER_URL``.
        verify_tls: Explicit TLS verification choice; ``None`` defers to
            ``$REANA_VERIFY_TLS`` (default off).
        profile: ``none``, ``cpu`` or ``heap``.
    """
    # ── 1. Logging must be configured before any output is produced ──────────
    validate_choice(loglevel.upper(), LOG_LEVELS, "loglevel")
    setup_logging(loglevel.upper())

    # ── 2. Profiling wraps the whole sub-command ─────────────────────────────
    validate_choice(profile, PROFILE_MODES, "profile")
    profiler = Profiler(profile)
    profiler.start()
    ctx.call_on_close(profiler.stop)

    # ── 3. Stash the connection settings for the sub-commands ────────────────
    ctx.obj = {
        "server_url": server_url or "",
        "verify_tls": verify_tls if verify_tls is not None else verify_tls_from_env(),
        "loglevel": loglevel.upper(),
    }
    log.debug("root options", server_url=server_url, verify_tls=ctx.obj["verify_tls"])


# ── Quota ────────────────────────────────────────────────────────────────────
main.set_lazy_command("quota-show", "reana_client.cli.quota:quota_show", "Quota commands:")
# ── Configuration ────────────────────────────────────────────────────────────
main.set_lazy_command("ping", "reana_client.cli.configuration:ping", "Configuration commands:")
main.set_lazy_command("version", "reana_client.cli.configuration:version", "Configuration commands:")
main.set_lazy_command("info", "reana_client.cli.configuration:info", "Configuration commands:")
main.set_lazy_command("completion", "reana_client.cli.completion:completion", "Configuration commands:")
# ── Workflow management ──────────────────────────────────────────────────────
main.set_lazy_command("list", "reana_client.cli.list_workflows:list_workflows", "Workflow management commands:")
main.set_lazy_command("delete", "reana_client.cli.delete:delete", "Workflow management commands:")
main.set_lazy_command("diff", "reana_client.cli.diff:diff", "Workflow management commands:")
# ── Workflow execution ───────────────────────────────────────────────────────
main.set_lazy_command("start", "reana_client.cli.execution:start", "Workflow execution commands:")
main.set_lazy_command("restart", "reana_client.cli.execution:restart", "Workflow execution commands:")
main.set_lazy_command("stop", "reana_client.cli.execution:stop", "Workflow execution commands:")
main.set_lazy_command("status", "reana_client.cli.status:status", "Workflow execution commands:")
main.set_lazy_command("logs", "reana_client.cli.logs:logs", "Workflow execution commands:")
# ── Workflow sharing ─────────────────────────────────────────────────────────
main.set_lazy_command("share-add", "reana_client.cli.sharing:share_add", "Workflow sharing commands:")
main.set_lazy_command("share-remove", "reana_client.cli.sharing:share_remove", "Workflow sharing commands:")
main.set_lazy_command("share-status", "reana_client.cli.sharing:share_status", "Workflow sharing commands:")
# ── Workspace interactive ────────────────────────────────────────────────────
main.set_lazy_command("open", "reana_client.cli.interactive:open_session", "Workspace interactive commands:")
main.set_lazy_command("close", "reana_client.cli.interactive:close_session", "Workspace interactive commands:")
# ── Workspace file management ────────────────────────────────────────────────
main.set_lazy_command("ls", "reana_client.cli.files:ls", "Workspace file management commands:")
main.set_lazy_command("du", "reana_client.cli.files:du", "Workspace file management commands:")
main.set_lazy_command("download", "reana_client.cli.files:download", "Workspace file management commands:")
main.set_lazy_command("upload", "reana_client.cli.files:upload", "Workspace file management commands:")
main.set_lazy_command("rm", "reana_client.cli.files:rm", "Workspace file management commands:")
main.set_lazy_command("mv", "reana_client.cli.files:mv", "Workspace file management commands:")
main.set_lazy_command("prune", "reana_client.cli.files:prune", "Workspace file management commands:")
# ── Workspace file retention ─────────────────────────────────────────────────
main.set_lazy_command(
    "retention-rules-list",
    "reana_client.cli.retention:retention_rules_list",
    "Workspace file retention commands:",
)
# ── Secret management ────────────────────────────────────────────────────────
main.set_lazy_command("secrets-add", "reana_client.cli.secrets:secrets_add", "Secret management commands:")
main.set_lazy_command("secrets-list", "reana_client.cli.secrets:secrets_list", "Secret management commands:")
main.set_lazy_command("secrets-delete", "reana_client.cli.secrets:secrets_delete", "Secret management commands:")

# The public symbol exported by this module.  Required for ``python -m`` entry-points.
cli = main
__all__: List[str] = ["main", "cli", "LazyGroup"]
