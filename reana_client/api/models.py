"""
Pydantic models that mirror the JSON payloads returned by the REANA server.

The models are deliberately permissive: unknown fields are ignored and almost
every field is optional, because the server omits keys whose value is empty
and adds new keys between releases.  A few payload fields carry JSON *inside*
a string (``logs``, ``reana_specification``, ``workspace_listing``); helper
methods decode those on demand.
"""

from __future__ import annotations

import json
from collections import OrderedDict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "Payload",
    "Size",
    "JobCount",
    "Progress",
    "Workflow",
    "WorkflowList",
    "WorkflowStatus",
    "StatusChange",
    "JobLog",
    "LogBundle",
    "WorkflowLogs",
    "WorkflowParameters",
    "WorkflowSpecification",
    "FileItem",
    "FileList",
    "DiskUsageItem",
    "DiskUsage",
    "WorkflowDiff",
    "DeletedFile",
    "FailedFile",
    "DeleteFiles",
    "Message",
    "OpenSession",
    "QuotaStat",
    "QuotaResource",
    "You",
    "InfoItem",
    "InfoListItem",
    "Info",
    "Secret",
    "SharedWith",
    "ShareStatus",
    "RetentionRule",
    "RetentionRules",
]


class Payload(BaseModel):
    """Common configuration for every response model."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# --------------------------------------------------------------------------- #
# 1.  Leaf value objects                                                      #
# --------------------------------------------------------------------------- #
class Size(Payload):
    """Byte count with its human-readable rendering."""

    raw: Optional[float] = None
    human_readable: Optional[str] = None


class JobCount(Payload):
    total: Optional[int] = None
    job_ids: List[str] = Field(default_factory=list)


class Progress(Payload):
    """Run progress block shared by the list and status payloads."""

    total: Optional[JobCount] = None
    finished: Optional[JobCount] = None
    running: Optional[JobCount] = None
    failed: Optional[JobCount] = None
    current_command: Optional[str] = None
    current_step_name: Optional[str] = None
    run_started_at: Optional[str] = None
    run_finished_at: Optional[str] = None
    run_stopped_at: Optional[str] = None


# --------------------------------------------------------------------------- #
# 2.  Workflows                                                               #
# --------------------------------------------------------------------------- #
class Workflow(Payload):
    id: Optional[str] = None
    name: str = ""
    status: Optional[str] = None
    user: Optional[str] = None
    created: Optional[str] = None
    size: Size = Field(default_factory=Size)
    progress: Progress = Field(default_factory=Progress)
    session_type: Optional[str] = None
    session_uri: Optional[str] = None
    session_status: Optional[str] = None


class WorkflowList(Payload):
    items: List[Workflow] = Field(default_factory=list)
    total: Optional[int] = None
    page: Optional[int] = None
    has_next: Optional[bool] = None
    has_prev: Optional[bool] = None
    user_has_workflows: Optional[bool] = None


class WorkflowStatus(Payload):
    id: Optional[str] = None
    name: str = ""
    status: str = ""
    user: Optional[str] = None
    created: Optional[str] = None
    progress: Progress = Field(default_factory=Progress)


class StatusChange(Payload):
    """Answer of the start and status-update endpoints."""

    message: Optional[str] = None
    status: str = ""
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    user: Optional[str] = None
    run_number: Optional[Any] = None


# --------------------------------------------------------------------------- #
# 3.  Logs                                                                    #
# --------------------------------------------------------------------------- #
class JobLog(Payload):
    workflow_uuid: Optional[str] = None
    job_name: Optional[str] = None
    compute_backend: Optional[str] = None
    backend_job_id: Optional[str] = None
    docker_img: Optional[str] = None
    cmd: Optional[str] = None
    status: Optional[str] = None
    logs: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


class LogBundle(Payload):
    """Decoded content of the ``logs`` string of :class:`WorkflowLogs`."""

    workflow_logs: Optional[str] = None
    engine_specific: Optional[str] = None
    job_logs: Dict[str, JobLog] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _null_job_logs(cls, values: Any):
        """Accept ``"job_logs": null`` as an empty mapping."""
        if isinstance(values, dict) and values.get("job_logs") is None:
            values = {**values, "job_logs": {}}
        return values


class WorkflowLogs(Payload):
    logs: str = ""
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    user: Optional[str] = None
    live_logs_enabled: Optional[bool] = None

    def bundle(self) -> LogBundle:
        """Decode the JSON document stored in :attr:`logs`."""
        if not self.logs:
            return LogBundle()
        return LogBundle.model_validate(json.loads(self.logs))


# --------------------------------------------------------------------------- #
# 4.  Specification and parameters                                            #
# --------------------------------------------------------------------------- #
class WorkflowParameters(Payload):
    type: str = ""
    parameters: Dict[str, Any] = Field(default_factory=dict)
    id: Optional[str] = None
    name: Optional[str] = None


class WorkflowSpecification(Payload):
    specification: Dict[str, Any] = Field(default_factory=dict)
    parameters: Dict[str, Any] = Field(default_factory=dict)

    def _section(self, kind: str, key: str) -> List[str]:
        block = self.specification.get(kind) or {}
        return list(block.get(key) or [])

    def input_files(self) -> List[str]:
        return self._section("inputs", "files")

    def input_directories(self) -> List[str]:
        return self._section("inputs", "directories")

    def output_files(self) -> List[str]:
        return self._section("outputs", "files")

    def output_directories(self) -> List[str]:
        return self._section("outputs", "directories")


# --------------------------------------------------------------------------- #
# 5.  Workspace                                                               #
# --------------------------------------------------------------------------- #
class FileItem(Payload):
    name: str = ""
    size: Size = Field(default_factory=Size)
    last_modified: Optional[str] = Field(None, alias="last-modified")


class FileList(Payload):
    items: List[FileItem] = Field(default_factory=list)
    total: Optional[int] = None


class DiskUsageItem(Payload):
    name: str = ""
    size: Size = Field(default_factory=Size)


class DiskUsage(Payload):
    disk_usage_info: List[DiskUsageItem] = Field(default_factory=list)
    user: Optional[str] = None
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None


class WorkflowDiff(Payload):
    reana_specification: Optional[str] = None
    workspace_listing: Optional[str] = None

    def specification_sections(self) -> "OrderedDict[str, List[str]]":
        """Return the specification diff with ``workflow`` renamed to ``specification``.

        Section order follows the server payload, except that the renamed
        section moves to the end.

        Raises:
            ValueError: If a section is not a list of strings.
        """
        sections: "OrderedDict[str, List[str]]" = OrderedDict()
        if not self.reana_specification:
            return sections
        decoded = json.loads(self.reana_specification, object_pairs_hook=OrderedDict)
        if "workflow" in decoded:
            decoded["specification"] = decoded.pop("workflow")
        for key, lines in decoded.items():
            if not isinstance(lines, list):
                raise ValueError(f"expected diff to be an array, got {lines!r}")
            if not all(isinstance(line, str) for line in lines):
                raise ValueError(f"expected diff lines to be strings, got {lines!r}")
            sections[key] = list(lines)
        return sections

    def workspace_lines(self) -> List[str]:
        """Return the non-empty lines of the workspace listing diff."""
        if not self.workspace_listing:
            return []
        text = json.loads(self.workspace_listing) or ""
        return [line for line in str(text).split("\n") if line]


class DeletedFile(Payload):
    size: int = 0


class FailedFile(Payload):
    error: str = ""


class DeleteFiles(Payload):
    deleted: Dict[str, DeletedFile] = Field(default_factory=dict)
    failed: Dict[str, FailedFile] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _null_maps(cls, values: Any):
        if isinstance(values, dict):
            values = {k: (v if v is not None else {}) for k, v in values.items()}
        return values


class Message(Payload):
    message: Optional[str] = None


# --------------------------------------------------------------------------- #
# 6.  Interactive sessions                                                    #
# --------------------------------------------------------------------------- #
class OpenSession(Payload):
    path: str = ""
    message: Optional[str] = None


# --------------------------------------------------------------------------- #
# 7.  User, quota and cluster information                                     #
# --------------------------------------------------------------------------- #
class QuotaStat(Payload):
    human_readable: str = ""
    raw: float = 0


class QuotaResource(Payload):
    """One quota resource; ``health`` is lifted out of the per-metric stats."""

    health: str = ""
    stats: Dict[str, QuotaStat] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_health(cls, values: Any):
        if isinstance(values, dict) and "stats" not in values:
            health = values.get("health") or ""
            stats = {
                k: v for k, v in values.items() if k != "health" and isinstance(v, dict)
            }
            values = {"health": health, "stats": stats}
        return values


class You(Payload):
    email: str = ""
    full_name: Optional[str] = None
    username: Optional[str] = None
    reana_server_version: str = ""
    quota: Dict[str, QuotaResource] = Field(default_factory=dict)


class InfoItem(Payload):
    title: str = ""
    value: Optional[Any] = None


class InfoListItem(Payload):
    title: str = ""
    value: List[str] = Field(default_factory=list)


class Info(Payload):
    """Cluster information; each advertised item is a ``{title, value}`` pair."""

    compute_backends: Optional[InfoListItem] = None
    default_kubernetes_jobs_timeout: Optional[InfoItem] = None
    default_kubernetes_memory_limit: Optional[InfoItem] = None
    default_workspace: Optional[InfoItem] = None
    kubernetes_max_memory_limit: Optional[InfoItem] = None
    maximum_interactive_session_inactivity_period: Optional[InfoItem] = None
    maximum_kubernetes_jobs_timeout: Optional[InfoItem] = None
    maximum_workspace_retention_period: Optional[InfoItem] = None
    workspaces_available: Optional[InfoListItem] = None


# --------------------------------------------------------------------------- #
# 8.  Secrets, sharing and retention                                          #
# --------------------------------------------------------------------------- #
class Secret(Payload):
    name: str = ""
    type: str = ""


class SharedWith(Payload):
    user_email: str = ""
    valid_until: Optional[str] = None


class ShareStatus(Payload):
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    shared_with: List[SharedWith] = Field(default_factory=list)


class RetentionRule(Payload):
    workspace_files: str = ""
    retention_days: int = 0
    apply_on: Optional[str] = None
    status: str = ""


class RetentionRules(Payload):
    workflow_id: Optional[str] = None
    workflow_name: Optional[str] = None
    retention_rules: List[RetentionRule] = Field(default_factory=list)
