"""Workload management: manifests, runtime adapters and reconciliation."""

from .exceptions import ManifestError, RuntimeAdapterError, WorkloadError
from .manager import WorkloadManager
from .manifests import ManifestStore
from .models import PodManifest, ReconcileReport, WorkloadInfo, WorkloadStatus
from .podman import PodmanRuntime
from .runtime import WorkloadRuntime

__all__ = [
    "WorkloadManager",
    "ManifestStore",
    "WorkloadRuntime",
    "PodmanRuntime",
    "PodManifest",
    "ReconcileReport",
    "WorkloadInfo",
    "WorkloadStatus",
    "WorkloadError",
    "ManifestError",
    "RuntimeAdapterError",
]
