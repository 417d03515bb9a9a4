"""
Exception hierarchy raised by the transport, validators and command handlers.

Every error derives from :class:`ReanaError`, itself a
:class:`click.ClickException`, so that anything escaping a command is printed
once as ``==> ERROR: <message>`` on *stderr* and the process exits with
status ``1``.  Usage errors (unknown flags, wrong arity) stay click's own.

API failures are discriminated by HTTP status code into :class:`APIError`
subclasses; :func:`error_for_status` performs the mapping.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

import click

from .utils.display import ERROR, display_message

__all__ = [
    "ReanaError",
    "ConfigurationError",
    "ValidationError",
    "FilterError",
    "FormatError",
    "SortError",
    "NetworkError",
    "SilentError",
    "APIError",
    "BadRequest",
    "Unauthorized",
    "Forbidden",
    "NotFound",
    "Conflict",
    "ServerError",
    "UnexpectedStatus",
    "error_for_status",
]


class ReanaError(click.ClickException):
    """Base class of every user-facing failure."""

    def show(self, file=None) -> None:  # noqa: D401 - click signature
        """Print the message with the ``ERROR`` tag on *stderr*."""
        display_message(self.format_message(), ERROR, err=True)


class ConfigurationError(ReanaError):
    """Missing or malformed server URL, access token or workflow."""


class ValidationError(ReanaError):
    """User input rejected before any request is sent."""


class FilterError(ValidationError):
    """Malformed or unknown ``--filter`` entry."""


class FormatError(ValidationError):
    """``--format`` asked for a column the table does not have."""

    def __init__(self, column: str, available: List[str]) -> None:
        self.column = column
        self.available = list(available)
        columns = "', '".join(self.available)
        super().__init__(
            f"invalid value for 'format column': '{column}' is not part of '{columns}'"
        )


class SortError(ValueError):
    """Sort column missing from the table; callers downgrade it to a warning."""


class NetworkError(ReanaError):
    """The server could not be reached at all."""

    def __init__(self, server_url: str) -> None:
        self.server_url = server_url
        super().__init__(
            f"'{server_url}' not found, please verify the provided server URL "
            "or check your internet connection"
        )


class SilentError(ReanaError):
    """Failure whose details were already printed by the command."""

    def __init__(self) -> None:
        super().__init__("")

    def show(self, file=None) -> None:  # noqa: D401 - click signature
        """Print nothing."""
        return None


# --------------------------------------------------------------------------- #
# Server responses                                                            #
# --------------------------------------------------------------------------- #
class APIError(ReanaError):
    """Non-success response returned by the server.

    Attributes:
        status_code: HTTP status code of the response.
        payload: Decoded JSON body, or the raw text when it is not JSON.
        operation: Name of the operation that produced the response.
    """

    def __init__(self, status_code: int, payload: Any, operation: str = "") -> None:
        self.status_code = status_code
        self.payload = payload
        self.operation = operation
        super().__init__(self._describe())

    def server_message(self) -> str:
        """Return the ``message`` field of the payload when there is one."""
        if isinstance(self.payload, dict) and self.payload.get("message"):
            return str(self.payload["message"])
        if self.payload in (None, ""):
            return f"{self.operation or 'request'} failed with status {self.status_code}"
        return str(self.payload)

    def _describe(self) -> str:
        return self.server_message()


class BadRequest(APIError):
    """HTTP 400."""


class Unauthorized(APIError):
    """HTTP 401."""


class Forbidden(APIError):
    """HTTP 403."""


class NotFound(APIError):
    """HTTP 404."""


class Conflict(APIError):
    """HTTP 409."""


class ServerError(APIError):
    """Any HTTP 5xx."""

    def _describe(self) -> str:
        return f"Error while querying: {self.server_message()}"


class UnexpectedStatus(APIError):
    """Status code the operation does not declare."""

    def _describe(self) -> str:
        return (
            f"unexpected status {self.status_code} from {self.operation or 'server'}: "
            f"{self.server_message()}"
        )


_ERRORS_BY_STATUS: Dict[int, Type[APIError]] = {
    400: BadRequest,
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
}


def error_for_status(
    status_code: int,
    payload: Any,
    operation: str = "",
    declared: Optional[tuple] = None,
) -> APIError:
    """Build the :class:`APIError` variant matching *status_code*.

    Args:
        status_code: HTTP status code of the failed response.
        payload: Decoded response body.
        operation: Operation name used in diagnostics.
        declared: Error codes the operation documents.  Codes outside this
            set (and outside 5xx) become :class:`UnexpectedStatus`.

    Returns:
        The exception instance; callers raise it.
    """
    if status_code >= 500:
        return ServerError(status_code, payload, operation)
    cls = _ERRORS_BY_STATUS.get(status_code)
    if cls is None or (declared is not None and status_code not in declared):
        return UnexpectedStatus(status_code, payload, operation)
    return cls(status_code, payload, operation)
