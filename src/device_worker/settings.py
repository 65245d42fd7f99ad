"""Settings model for the device worker.

Public API (the "studs"):
    WorkerSettings: Directories, intervals and runtime options
"""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from .configuration.manager import NotificationPolicy

DEFAULT_DATA_DIR = Path("/var/local/device-worker")
DEFAULT_CONFIG_DIR = Path("/etc/device-worker")

# Data-driven mapping: settings field -> env var
_ENV_MAP: dict[str, str] = {
    "data_dir": "DEVICE_WORKER_DATA_DIR",
    "config_dir": "DEVICE_WORKER_CONFIG_DIR",
    "reconcile_interval_seconds": "DEVICE_WORKER_RECONCILE_INTERVAL",
    "notification_policy": "DEVICE_WORKER_NOTIFICATION_POLICY",
    "podman_binary": "DEVICE_WORKER_PODMAN_BINARY",
    "runtime_timeout_seconds": "DEVICE_WORKER_RUNTIME_TIMEOUT",
}


class WorkerSettings(BaseModel):
    """Settings for a device worker process.

    Attributes:
        data_dir: Directory holding the persisted device configuration
        config_dir: Directory under which workload manifests are kept
        reconcile_interval_seconds: Delay between reconciliation sweeps
        notification_policy: How observer failures are handled
        podman_binary: podman executable used by the runtime adapter
        runtime_timeout_seconds: Upper bound for a single runtime call
    """

    data_dir: Path = Field(DEFAULT_DATA_DIR, description="Persisted configuration directory")
    config_dir: Path = Field(DEFAULT_CONFIG_DIR, description="Manifest parent directory")
    reconcile_interval_seconds: float = Field(
        15.0, gt=0, description="Seconds between reconciliation sweeps"
    )
    notification_policy: NotificationPolicy = Field(
        NotificationPolicy.FAIL_FAST, description="Observer notification policy"
    )
    podman_binary: str = Field("podman", min_length=1, description="podman executable")
    runtime_timeout_seconds: float = Field(
        120.0, gt=0, le=3600, description="Timeout for a single runtime call"
    )

    @classmethod
    def from_env(cls, **overrides: Any) -> "WorkerSettings":
        """Create WorkerSettings from environment variables.

        Environment variables:
            DEVICE_WORKER_DATA_DIR: Persisted configuration directory
            DEVICE_WORKER_CONFIG_DIR: Manifest parent directory
            DEVICE_WORKER_RECONCILE_INTERVAL: Seconds between sweeps
            DEVICE_WORKER_NOTIFICATION_POLICY: fail_fast or best_effort
            DEVICE_WORKER_PODMAN_BINARY: podman executable
            DEVICE_WORKER_RUNTIME_TIMEOUT: Timeout for a runtime call

        Args:
            overrides: Field values that take precedence over the environment;
                None values are ignored

        Returns:
            WorkerSettings instance

        Raises:
            ValueError: If a value fails validation
        """
        kwargs: dict[str, Any] = {}
        for field, env_var in _ENV_MAP.items():
            value = os.environ.get(env_var)
            if value is not None:
                kwargs[field] = value
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)


__all__ = ["WorkerSettings", "DEFAULT_DATA_DIR", "DEFAULT_CONFIG_DIR"]
