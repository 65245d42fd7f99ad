"""Workload data models.

Runtime-facing models: the rendered pod manifest written to disk, the
live status reported by the container runtime, and the outcome of a
reconciliation sweep.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class WorkloadStatus(str, Enum):
    """Pod status values reported by the container runtime."""

    CREATED = "Created"
    RUNNING = "Running"
    STOPPED = "Stopped"
    EXITED = "Exited"
    DEGRADED = "Degraded"
    DEAD = "Dead"
    ERROR = "Error"


class WorkloadInfo(BaseModel):
    """Live runtime state of a workload. Never persisted.

    ``status`` is kept as the raw runtime string so statuses this
    module does not know about still round-trip.
    """

    id: str = Field(default="", description="Runtime identifier")
    name: str = Field(..., description="Workload name")
    status: str = Field(..., description="Runtime status, e.g. 'Running'")

    @property
    def is_running(self) -> bool:
        return self.status == WorkloadStatus.RUNNING.value


class ManifestMetadata(BaseModel):
    """Identity metadata of a manifest."""

    name: str = Field(..., min_length=1, description="Workload name")


class PodManifest(BaseModel):
    """Runnable unit manifest rendered from a workload spec.

    Written to <config_dir>/manifests/<name>.yaml.
    """

    api_version: str = Field(default="v1", alias="apiVersion", description="API version")
    kind: str = Field(default="Pod", description="Manifest kind")
    metadata: ManifestMetadata = Field(..., description="Identity metadata")
    spec: dict[str, Any] = Field(default_factory=dict, description="Pod spec")

    class Config:
        populate_by_name = True

    @property
    def name(self) -> str:
        return self.metadata.name


class ReconcileReport(BaseModel):
    """Report returned after a reconciliation sweep."""

    started: list[str] = Field(default_factory=list, description="Workloads restarted")
    ran: list[str] = Field(default_factory=list, description="Workloads run from manifest")
    skipped: list[str] = Field(default_factory=list, description="Workloads already running")
    errors: list[str] = Field(default_factory=list, description="Per-manifest failures")
    duration_seconds: float = 0.0


__all__ = [
    "WorkloadStatus",
    "WorkloadInfo",
    "ManifestMetadata",
    "PodManifest",
    "ReconcileReport",
]
