"""Device Worker - on-device desired-state reconciliation for edge workloads.

The worker receives desired-state documents describing containerized
workloads, persists them durably and keeps the local container runtime
matching them.

Key components:
    - ConfigurationManager: Change detection, observer fan-out, persistence
    - WorkloadManager: Manifest lifecycle and the self-healing reconcile loop
    - DeviceWorker: Startup wiring of both managers
    - CLI: ``device-worker apply|show|workloads|reconcile|run|deregister``

Quick start:
    device-worker --data-dir ./data --config-dir ./etc apply desired.json
    device-worker --data-dir ./data --config-dir ./etc run --source desired.json
"""

from .configuration import (
    ConfigurationManager,
    DeviceConfigurationMessage,
    NotificationPolicy,
    WorkloadSpec,
)
from .settings import WorkerSettings
from .worker import DeviceWorker
from .workloads import PodmanRuntime, WorkloadManager, WorkloadRuntime

__version__ = "0.1.0"

__all__ = [
    "ConfigurationManager",
    "DeviceConfigurationMessage",
    "NotificationPolicy",
    "WorkloadSpec",
    "WorkloadManager",
    "WorkloadRuntime",
    "PodmanRuntime",
    "DeviceWorker",
    "WorkerSettings",
    "__version__",
]
