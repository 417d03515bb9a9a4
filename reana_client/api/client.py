"""
HTTP transport for the REANA server REST API.

Only the mechanics of *sending* a request and *classifying* its response live
here: every server operation is declared once in :data:`ENDPOINTS` (method,
path template, success codes, documented error codes) and exposed as one
method of :class:`ReanaClient`.  Methods take plain keyword arguments, attach
the ``access_token`` query parameter, and return either a pydantic model from
:mod:`reana_client.api.models` or, for file downloads, the raw
:class:`requests.Response`.

Response discrimination
-----------------------
* a declared success code returns normally;
* a declared 4xx code raises the matching :class:`~reana_client.errors.APIError`
  subclass (``NotFound``, ``Forbidden`` ...);
* any 5xx raises :class:`~reana_client.errors.ServerError`;
* anything else raises :class:`~reana_client.errors.UnexpectedStatus` carrying
  the raw payload.

Connection failures surface as :class:`~reana_client.errors.NetworkError`.

TLS
---
Certificate verification is **disabled by default** because REANA clusters
are commonly deployed with self-signed certificates.  Pass
``verify_tls=True`` (CLI: ``--verify-tls`` or ``REANA_VERIFY_TLS=1``) to turn
it back on.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar
from urllib.parse import quote, urlsplit

import requests
import structlog
import urllib3
from pydantic import BaseModel

from ..config import default_timeout
from ..errors import ConfigurationError, NetworkError, error_for_status
from ..utils.logging import redact_params
from . import models

__all__ = ["Endpoint", "ENDPOINTS", "ReanaClient", "encode_query"]

log = structlog.get_logger()

M = TypeVar("M", bound=BaseModel)

_DEFAULT_ERRORS: Tuple[int, ...] = (400, 401, 403, 404, 409)


@dataclass(frozen=True)
class Endpoint:
    """Static description of one server operation."""

    method: str
    path: str
    ok: Tuple[int, ...] = (200,)
    errors: Tuple[int, ...] = _DEFAULT_ERRORS


# --------------------------------------------------------------------------- #
# Endpoint table                                                              #
# --------------------------------------------------------------------------- #
ENDPOINTS: Dict[str, Endpoint] = {
    "get_workflows": Endpoint("GET", "/api/workflows"),
    "get_workflow_status": Endpoint("GET", "/api/workflows/{workflow}/status"),
    "set_workflow_status": Endpoint("PUT", "/api/workflows/{workflow}/status"),
    "start_workflow": Endpoint("POST", "/api/workflows/{workflow}/start"),
    "get_workflow_logs": Endpoint("GET", "/api/workflows/{workflow}/logs"),
    "get_workflow_parameters": Endpoint("GET", "/api/workflows/{workflow}/parameters"),
    "get_workflow_specification": Endpoint("GET", "/api/workflows/{workflow}/specification"),
    "get_files": Endpoint("GET", "/api/workflows/{workflow}/workspace"),
    "upload_file": Endpoint("POST", "/api/workflows/{workflow}/workspace"),
    "download_file": Endpoint("GET", "/api/workflows/{workflow}/workspace/{file_name}"),
    "delete_file": Endpoint("DELETE", "/api/workflows/{workflow}/workspace/{file_name}"),
    "move_files": Endpoint("PUT", "/api/workflows/{workflow}/move_files"),
    "get_workflow_disk_usage": Endpoint("GET", "/api/workflows/{workflow}/disk_usage"),
    "get_workflow_diff": Endpoint("GET", "/api/workflows/{workflow_a}/diff/{workflow_b}"),
    "prune_workspace": Endpoint("POST", "/api/workflows/{workflow}/prune"),
    "open_interactive_session": Endpoint(
        "POST", "/api/workflows/{workflow}/open/{session_type}"
    ),
    "close_interactive_session": Endpoint("POST", "/api/workflows/{workflow}/close/"),
    "get_workflow_retention_rules": Endpoint(
        "GET", "/api/workflows/{workflow}/retention_rules"
    ),
    "share_workflow": Endpoint("POST", "/api/workflows/{workflow}/share"),
    "unshare_workflow": Endpoint("POST", "/api/workflows/{workflow}/unshare"),
    "get_workflow_share_status": Endpoint("GET", "/api/workflows/{workflow}/share-status"),
    "get_you": Endpoint("GET", "/api/you"),
    "info": Endpoint("GET", "/api/info"),
    "get_secrets": Endpoint("GET", "/api/secrets"),
    "add_secrets": Endpoint("POST", "/api/secrets", ok=(200, 201)),
    "delete_secrets": Endpoint("DELETE", "/api/secrets/"),
}


# --------------------------------------------------------------------------- #
# Parameter serialisation                                                     #
# --------------------------------------------------------------------------- #
def encode_query(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Return *params* ready for :mod:`requests`.

    ``None`` values are dropped, booleans become literal ``true``/``false``,
    lists are kept so that the key repeats, every other value is ``str()``-ed.
    """
    encoded: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        elif isinstance(value, (list, tuple)):
            encoded[key] = [str(v) for v in value]
        else:
            encoded[key] = str(value)
    return encoded


def _expand_path(template: str, path_params: Mapping[str, str]) -> str:
    """Substitute URL-quoted *path_params* into *template*.

    Raises:
        ValueError: If a parameter is empty; this is a programming error in the
            caller, not a user error.
    """
    quoted = {}
    for key, value in path_params.items():
        if value is None or str(value) == "":
            raise ValueError(f"path parameter '{key}' must not be empty")
        quoted[key] = quote(str(value), safe="/")
    return template.format(**quoted)


def _decode_payload(resp: requests.Response) -> Any:
    """Return the JSON body of *resp*, or its text when it is not JSON."""
    try:
        return resp.json()
    except ValueError:
        return resp.text


# --------------------------------------------------------------------------- #
# Client                                                                      #
# --------------------------------------------------------------------------- #
class ReanaClient:
    """Token-authenticated client bound to one REANA server.

    Args:
        server_url: Base URL such as ``https://reana.cern.ch``.  Only its host
            (and port) are used; requests always go over HTTPS.
        verify_tls: Verify the server certificate.  Off by default.
        timeout: Per-request timeout in seconds; ``None`` reads
            ``REANA_TIMEOUT`` or falls back to 60 seconds.
        session: Pre-built :class:`requests.Session`, mostly for tests.

    Raises:
        ConfigurationError: If *server_url* has no host.
    """

    def __init__(
        self,
        server_url: str,
        *,
        verify_tls: bool = False,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        parts = urlsplit(server_url if "//" in server_url else f"//{server_url}")
        if not parts.netloc:
            raise ConfigurationError("please set REANA_SERVER_URL environment variable")
        self.server_url = server_url.rstrip("/")
        self.base_url = f"https://{parts.netloc}"
        self.timeout = timeout if timeout is not None else default_timeout()
        self.session = session or requests.Session()
        self.session.verify = verify_tls
        self.session.headers.setdefault("Accept", "application/json")
        if not verify_tls:
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    # ------------------------------------------------------------------ #
    # Low-level request                                                  #
    # ------------------------------------------------------------------ #
    def request(
        self,
        operation: str,
        token: Optional[str],
        *,
        path: Optional[Mapping[str, str]] = None,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        headers: Optional[Mapping[str, str]] = None,
        stream: bool = False,
        timeout: Optional[float] = None,
    ) -> requests.Response:
        """Send *operation* and return the response when its status is a success.

        Args:
            operation: Key of :data:`ENDPOINTS`.
            token: Access token sent as the ``access_token`` query parameter.
            path: Values for the placeholders of the path template.
            params: Query parameters, encoded by :func:`encode_query`.
            json: JSON-serialisable request body.
            data: Raw request body (file uploads).
            headers: Extra request headers.
            stream: Defer downloading the body.
            timeout: Override of the client timeout for this call.

        Returns:
            The raw :class:`requests.Response`.

        Raises:
            NetworkError: If the server cannot be reached.
            APIError: For any non-success status, see the module docstring.
        """
        endpoint = ENDPOINTS[operation]
        url = self.base_url + _expand_path(endpoint.path, path or {})
        query = encode_query(params or {})
        if token is not None:
            query["access_token"] = token

        log.debug(
            "request",
            operation=operation,
            method=endpoint.method,
            url=url,
            params=redact_params(query),
        )
        try:
            resp = self.session.request(
                endpoint.method,
                url,
                params=query,
                json=json,
                data=data,
                headers=dict(headers or {}),
                stream=stream,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as exc:
            log.debug("request failed", operation=operation, error=str(exc))
            raise NetworkError(self.server_url) from exc

        log.debug("response", operation=operation, status_code=resp.status_code)
        if resp.status_code in endpoint.ok:
            return resp
        raise error_for_status(
            resp.status_code,
            _decode_payload(resp),
            operation,
            declared=endpoint.errors,
        )

    def _call(self, operation: str, model: Type[M], token: str, **kwargs: Any) -> M:
        resp = self.request(operation, token, **kwargs)
        return model.model_validate(_decode_payload(resp) or {})

    # ------------------------------------------------------------------ #
    # Workflows                                                          #
    # ------------------------------------------------------------------ #
    def get_workflows(
        self,
        token: str,
        *,
        run_type: str = "batch",
        verbose: bool = False,
        page: Optional[int] = None,
        size: Optional[int] = None,
        workflow: Optional[str] = None,
        status: Optional[Iterable[str]] = None,
        search: Optional[str] = None,
        include_progress: Optional[bool] = None,
        include_workspace_size: Optional[bool] = None,
    ) -> models.WorkflowList:
        """List workflows (``run_type="batch"``) or interactive sessions."""
        params = {
            "type": run_type,
            "verbose": verbose,
            "page": page,
            "size": size,
            "workflow_id_or_name": workflow or None,
            "status": list(status) if status else None,
            "search": search or None,
            "include_progress": include_progress,
            "include_workspace_size": include_workspace_size,
        }
        return self._call("get_workflows", models.WorkflowList, token, params=params)

    def get_workflow_status(self, token: str, workflow: str) -> models.WorkflowStatus:
        return self._call(
            "get_workflow_status",
            models.WorkflowStatus,
            token,
            path={"workflow": workflow},
        )

    def set_workflow_status(
        self,
        token: str,
        workflow: str,
        status: str,
        *,
        all_runs: bool = False,
        workspace: bool = False,
    ) -> models.StatusChange:
        """Request the *status* transition (``start``, ``stop`` or ``deleted``)."""
        return self._call(
            "set_workflow_status",
            models.StatusChange,
            token,
            path={"workflow": workflow},
            params={"status": status},
            json={"all_runs": all_runs, "workspace": workspace},
        )

    def start_workflow(
        self,
        token: str,
        workflow: str,
        *,
        input_parameters: Optional[Mapping[str, str]] = None,
        operational_options: Optional[Mapping[str, str]] = None,
        restart: bool = False,
    ) -> models.StatusChange:
        body: Dict[str, Any] = {
            "input_parameters": dict(input_parameters or {}),
            "operational_options": dict(operational_options or {}),
        }
        if restart:
            body["restart"] = True
        return self._call(
            "start_workflow",
            models.StatusChange,
            token,
            path={"workflow": workflow},
            json=body,
        )

    def get_workflow_logs(
        self,
        token: str,
        workflow: str,
        *,
        steps: Optional[List[str]] = None,
        page: Optional[int] = None,
        size: Optional[int] = None,
    ) -> models.WorkflowLogs:
        return self._call(
            "get_workflow_logs",
            models.WorkflowLogs,
            token,
            path={"workflow": workflow},
            params={"steps": steps or None, "page": page, "size": size},
        )

    def get_workflow_parameters(self, token: str, workflow: str) -> models.WorkflowParameters:
        return self._call(
            "get_workflow_parameters",
            models.WorkflowParameters,
            token,
            path={"workflow": workflow},
        )

    def get_workflow_specification(
        self, token: str, workflow: str
    ) -> models.WorkflowSpecification:
        return self._call(
            "get_workflow_specification",
            models.WorkflowSpecification,
            token,
            path={"workflow": workflow},
        )

    def get_workflow_diff(
        self,
        token: str,
        workflow_a: str,
        workflow_b: str,
        *,
        brief: bool = False,
        context_lines: int = 5,
    ) -> models.WorkflowDiff:
        return self._call(
            "get_workflow_diff",
            models.WorkflowDiff,
            token,
            path={"workflow_a": workflow_a, "workflow_b": workflow_b},
            params={"brief": brief, "context_lines": context_lines},
        )

    # ------------------------------------------------------------------ #
    # Workspace                                                          #
    # ------------------------------------------------------------------ #
    def get_files(
        self,
        token: str,
        workflow: str,
        *,
        file_name: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        size: Optional[int] = None,
    ) -> models.FileList:
        return self._call(
            "get_files",
            models.FileList,
            token,
            path={"workflow": workflow},
            params={
                "file_name": file_name or None,
                "search": search or None,
                "page": page,
                "size": size,
            },
        )

    def upload_file(self, token: str, workflow: str, file_name: str, content: bytes) -> models.Message:
        """Upload *content* as *file_name* inside the workspace."""
        return self._call(
            "upload_file",
            models.Message,
            token,
            path={"workflow": workflow},
            params={"file_name": file_name},
            data=content,
            headers={"Content-Type": "application/octet-stream"},
        )

    def download_file(self, token: str, workflow: str, file_name: str) -> requests.Response:
        """Return the raw response so callers can read headers and content."""
        return self.request(
            "download_file",
            token,
            path={"workflow": workflow, "file_name": file_name},
        )

    def delete_file(self, token: str, workflow: str, file_name: str) -> models.DeleteFiles:
        return self._call(
            "delete_file",
            models.DeleteFiles,
            token,
            path={"workflow": workflow, "file_name": file_name},
        )

    def move_files(self, token: str, workflow: str, source: str, target: str) -> models.Message:
        return self._call(
            "move_files",
            models.Message,
            token,
            path={"workflow": workflow},
            params={"source": source, "target": target},
        )

    def get_workflow_disk_usage(
        self,
        token: str,
        workflow: str,
        *,
        summarize: bool = False,
        search: Optional[str] = None,
    ) -> models.DiskUsage:
        body: Dict[str, Any] = {"summarize": summarize}
        if search:
            body["search"] = search
        return self._call(
            "get_workflow_disk_usage",
            models.DiskUsage,
            token,
            path={"workflow": workflow},
            json=body,
        )

    def prune_workspace(
        self,
        token: str,
        workflow: str,
        *,
        include_inputs: bool = False,
        include_outputs: bool = False,
    ) -> models.Message:
        return self._call(
            "prune_workspace",
            models.Message,
            token,
            path={"workflow": workflow},
            params={"include_inputs": include_inputs, "include_outputs": include_outputs},
        )

    def get_workflow_retention_rules(self, token: str, workflow: str) -> models.RetentionRules:
        return self._call(
            "get_workflow_retention_rules",
            models.RetentionRules,
            token,
            path={"workflow": workflow},
        )

    # ------------------------------------------------------------------ #
    # Interactive sessions                                               #
    # ------------------------------------------------------------------ #
    def open_interactive_session(
        self,
        token: str,
        workflow: str,
        session_type: str,
        *,
        image: Optional[str] = None,
    ) -> models.OpenSession:
        body = {"image": image} if image else {}
        return self._call(
            "open_interactive_session",
            models.OpenSession,
            token,
            path={"workflow": workflow, "session_type": session_type},
            json=body,
        )

    def close_interactive_session(self, token: str, workflow: str) -> models.Message:
        return self._call(
            "close_interactive_session",
            models.Message,
            token,
            path={"workflow": workflow},
        )

    # ------------------------------------------------------------------ #
    # Sharing                                                            #
    # ------------------------------------------------------------------ #
    def share_workflow(
        self,
        token: str,
        workflow: str,
        user_email: str,
        *,
        message: Optional[str] = None,
        valid_until: Optional[str] = None,
    ) -> models.Message:
        body: Dict[str, Any] = {"user_email_to_share_with": user_email}
        if message:
            body["message"] = message
        if valid_until:
            body["valid_until"] = valid_until
        return self._call(
            "share_workflow",
            models.Message,
            token,
            path={"workflow": workflow},
            json=body,
        )

    def unshare_workflow(self, token: str, workflow: str, user_email: str) -> models.Message:
        return self._call(
            "unshare_workflow",
            models.Message,
            token,
            path={"workflow": workflow},
            json={"user_email_to_unshare_with": user_email},
        )

    def get_workflow_share_status(self, token: str, workflow: str) -> models.ShareStatus:
        return self._call(
            "get_workflow_share_status",
            models.ShareStatus,
            token,
            path={"workflow": workflow},
        )

    # ------------------------------------------------------------------ #
    # User, cluster and secrets                                          #
    # ------------------------------------------------------------------ #
    def get_you(self, token: str) -> models.You:
        return self._call("get_you", models.You, token)

    def info(self, token: str) -> models.Info:
        return self._call("info", models.Info, token)

    def get_secrets(self, token: str) -> List[models.Secret]:
        resp = self.request("get_secrets", token)
        return [models.Secret.model_validate(item) for item in _decode_payload(resp) or []]

    def add_secrets(
        self,
        token: str,
        secrets: Mapping[str, Mapping[str, str]],
        *,
        overwrite: bool = False,
    ) -> models.Message:
        """Upload *secrets* shaped ``{name: {"type": ..., "value": <base64>}}``."""
        return self._call(
            "add_secrets",
            models.Message,
            token,
            params={"overwrite": overwrite},
            json=dict(secrets),
        )

    def delete_secrets(self, token: str, names: List[str]) -> List[str]:
        """Delete *names* and return the names the server confirms."""
        resp = self.request("delete_secrets", token, json=list(names))
        payload = _decode_payload(resp)
        return [str(n) for n in payload] if isinstance(payload, list) else list(names)
