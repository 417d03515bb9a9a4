"""
Polling loops behind ``logs --follow`` and ``start --follow``.

Both loops are single-threaded: each iteration performs blocking requests,
prints what changed and sleeps.  An interrupt (Ctrl-C) stops the loop before
the next request and aborts the command with a non-zero exit status.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Callable, Optional, Tuple

import click
import structlog

from ..config import CHECK_INTERVAL, FOLLOW_INTERVAL, progressing_statuses, terminal_statuses
from ..errors import ReanaError
from .display import INFO, SUCCESS, display_message
from .workflows import get_status, status_change_message

if TYPE_CHECKING:
    from ..api.client import ReanaClient

__all__ = ["new_content", "LogFollower", "follow_workflow"]

log = structlog.get_logger()


def new_content(previous: str, current: str) -> str:
    """Return the part of *current* not printed yet.

    When *current* extends *previous* only the suffix is new.  Otherwise the
    server truncated or rewrote the buffer and *current* is returned whole.
    """
    if current.startswith(previous):
        return current[len(previous):]
    return current


class LogFollower:
    """Stream the logs of a workflow, or of one of its steps, until it ends.

    Args:
        client: Transport used for the log and status requests.
        token: Access token.
        workflow: Workflow name or UUID.
        step: Optional step (job name) whose logs are streamed instead of the
            workflow engine logs.
        interval: Seconds between polls; values below 1 fall back to
            :data:`~reana_client.config.FOLLOW_INTERVAL`.
        sleep: Sleep function; defaults to :func:`time.sleep` looked up at call time.
    """

    def __init__(
        self,
        client: "ReanaClient",
        token: str,
        workflow: str,
        *,
        step: Optional[str] = None,
        interval: int = FOLLOW_INTERVAL,
        sleep: Optional[Callable[[float], None]] = None,
    ) -> None:
        self.client = client
        self.token = token
        self.workflow = workflow
        self.step = step
        self.interval = interval if interval >= 1 else FOLLOW_INTERVAL
        self.sleep = sleep
        self.previous = ""
        self._ends_with_newline = True

    def _fetch(self) -> Tuple[str, Optional[str]]:
        """Return ``(logs, status)`` for the followed workflow or step."""
        payload = self.client.get_workflow_logs(
            self.token, self.workflow, steps=[self.step] if self.step else None
        )
        if payload.live_logs_enabled is False:
            raise ReanaError(
                "live logs are not enabled, please rerun the command without the --follow flag"
            )
        bundle = payload.bundle()

        if self.step:
            for job in bundle.job_logs.values():
                if job.job_name == self.step:
                    if job.status in terminal_statuses():
                        return job.logs or "", job.status
                    # Step still running: end only when the whole run ended.
                    break
            else:
                job = None
            status = get_status(self.client, self.token, self.workflow).status
            return (job.logs or "") if job is not None else "", status

        status = get_status(self.client, self.token, self.workflow).status
        return bundle.workflow_logs or "", status

    def _emit(self, logs: str) -> None:
        chunk = new_content(self.previous, logs)
        self.previous = logs
        if chunk:
            click.echo(chunk, nl=False)
            self._ends_with_newline = chunk.endswith("\n")

    def _closing_message(self, status: str) -> str:
        subject = f"Step {self.step}" if self.step else self.workflow
        try:
            return status_change_message(subject, status)
        except ReanaError:
            return f"{subject} status is {status}"

    def poll(self) -> Optional[str]:
        """Run one fetch-and-print step; return the status when it is terminal."""
        logs, status = self._fetch()
        self._emit(logs)
        log.debug("follow poll", workflow=self.workflow, step=self.step, status=status)
        if status in terminal_statuses():
            return status
        return None

    def run(self) -> str:
        """Poll until a terminal status; return that status.

        Raises:
            click.Abort: When interrupted.
        """
        try:
            while True:
                status = self.poll()
                if status is not None:
                    if not self._ends_with_newline:
                        click.echo()
                    display_message(f"{self._closing_message(status)}.", INFO)
                    return status
                (self.sleep or time.sleep)(self.interval)
        except KeyboardInterrupt:
            log.debug("log following interrupted", workflow=self.workflow)
            raise click.Abort() from None


def follow_workflow(
    client: "ReanaClient",
    token: str,
    workflow: str,
    current_status: str,
    *,
    on_finished: Optional[Callable[[], None]] = None,
    interval: int = CHECK_INTERVAL,
    sleep: Optional[Callable[[float], None]] = None,
) -> None:
    """Poll the status of a started workflow until it leaves the running states.

    Each poll prints the status-change message.  On ``finished`` the
    *on_finished* callback runs (``start`` lists the output files there); on
    ``deleted``, ``failed`` or ``stopped`` the command fails.

    Raises:
        ReanaError: If the workflow did not finish successfully.
        click.Abort: When interrupted.
    """
    active = [s for s in progressing_statuses() if s != "created"]
    try:
        while current_status in active:
            (sleep or time.sleep)(interval)
            current_status = get_status(client, token, workflow).status
            display_message(status_change_message(workflow, current_status), SUCCESS)

            if current_status == "finished":
                display_message("Listing workflow output files...", INFO)
                if on_finished is not None:
                    on_finished()
            elif current_status in ("deleted", "failed", "stopped"):
                raise ReanaError("the workflow did not finish")
    except KeyboardInterrupt:
        log.debug("workflow following interrupted", workflow=workflow)
        raise click.Abort() from None
