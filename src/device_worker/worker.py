"""DeviceWorker - wires the configuration and workload managers together.

Public API (the "studs"):
    DeviceWorker: Startup wiring and lifecycle for one device
"""

from __future__ import annotations

import logging
from pathlib import Path

from .configuration import ConfigurationManager, DeviceConfigurationMessage
from .settings import WorkerSettings
from .workloads import PodmanRuntime, WorkloadManager, WorkloadRuntime

_logger = logging.getLogger(__name__)


class DeviceWorker:
    """Builds the managers for a device and registers observers in order.

    The workload manager is the first observer, so a document is only
    persisted once its workloads have been applied. The reconciliation
    loop is not started until ``start`` is called.
    """

    def __init__(self, settings: WorkerSettings, runtime: WorkloadRuntime | None = None) -> None:
        self._settings = settings
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        settings.config_dir.mkdir(parents=True, exist_ok=True)

        if runtime is None:
            runtime = PodmanRuntime(
                binary=settings.podman_binary,
                timeout_seconds=settings.runtime_timeout_seconds,
            )
        self.configuration = ConfigurationManager(
            settings.data_dir, policy=settings.notification_policy
        )
        self.workloads = WorkloadManager(
            settings.config_dir,
            runtime,
            interval_seconds=settings.reconcile_interval_seconds,
            auto_start=False,
        )
        self.configuration.register_observer(self.workloads)

    @property
    def settings(self) -> WorkerSettings:
        return self._settings

    def start(self) -> None:
        self.workloads.start()

    def stop(self) -> None:
        self.workloads.stop()

    def __enter__(self) -> DeviceWorker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def apply_file(self, path: Path | str) -> bool:
        """Apply a desired-state JSON document from a file.

        Returns:
            True if the document was applied, False if unchanged

        Raises:
            OSError: If the file cannot be read
            pydantic.ValidationError: If the document is malformed
            ConfigurationUpdateError: If the update was rejected
        """
        path = Path(path)
        message = DeviceConfigurationMessage.model_validate_json(path.read_text())
        _logger.debug("Loaded desired state version %r from %s", message.version, path)
        return self.configuration.update(message)


__all__ = ["DeviceWorker"]
