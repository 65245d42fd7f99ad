"""Configuration Manager - owns the persisted desired-state document.

The manager accepts new desired-state documents, decides whether they
represent a real change, fans the change out to registered observers
and only then persists it. The on-disk file is the durability boundary:
on restart it is the sole source of truth for what should be running.

Public API (the "studs"):
    ConfigurationManager: Change detection, observer fan-out, persistence
    Observer: Protocol implemented by components that react to new documents
    NotificationPolicy: Fail-fast or best-effort observer notification
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import threading
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from .exceptions import ConfigurationPersistError, ConfigurationUpdateError, ObserverUpdateError
from .models import (
    DEFAULT_CONFIGURATION_MESSAGE,
    DeviceConfiguration,
    DeviceConfigurationMessage,
    WorkloadSpec,
)

_logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "device-config.json"
CONFIG_FILE_MODE = 0o600

# How often the owning process should pull configuration from upstream
DATA_TRANSFER_INTERVAL = timedelta(seconds=15)


@runtime_checkable
class Observer(Protocol):
    """Component notified synchronously when the desired state changes.

    Implementations raise to reject the document; a rejection prevents
    the document from being persisted.
    """

    def update(self, configuration: DeviceConfigurationMessage) -> None:
        """Apply a new desired-state document."""
        ...


class NotificationPolicy(str, Enum):
    """How observer failures are handled during an update."""

    FAIL_FAST = "fail_fast"
    BEST_EFFORT = "best_effort"


def _change_key(message: DeviceConfigurationMessage) -> tuple[Any, list[dict[str, Any]]]:
    """Fields that take part in change detection (version is excluded)."""
    configuration = (
        message.configuration.model_dump() if message.configuration is not None else None
    )
    workloads = [workload.model_dump() for workload in message.workloads]
    return configuration, workloads


class ConfigurationManager:
    """Holds the current desired-state document and applies updates.

    Observers are notified in registration order. They must be registered
    during startup wiring, before the first ``update`` call.
    """

    def __init__(
        self,
        data_dir: Path | str,
        default: DeviceConfigurationMessage = DEFAULT_CONFIGURATION_MESSAGE,
        policy: NotificationPolicy = NotificationPolicy.FAIL_FAST,
    ) -> None:
        """Load the persisted document or fall back to the default.

        Args:
            data_dir: Directory holding device-config.json
            default: Document used when no valid persisted document exists
            policy: Observer notification policy
        """
        self._config_file = Path(data_dir) / CONFIG_FILE_NAME
        self._policy = NotificationPolicy(policy)
        self._observers: list[Observer] = []
        self._initial = threading.Event()
        _logger.info("Device config file: %s", self._config_file)

        loaded = self._load()
        if loaded is None:
            self._configuration = default
            self._initial.set()
        else:
            self._configuration = loaded

    def _load(self) -> DeviceConfigurationMessage | None:
        try:
            raw = self._config_file.read_text()
        except FileNotFoundError:
            _logger.info("No device config file, using default configuration")
            return None
        except OSError as e:
            _logger.error("Cannot read device config file %s: %s", self._config_file, e)
            return None
        try:
            return DeviceConfigurationMessage.model_validate_json(raw)
        except ValidationError as e:
            _logger.error("Invalid device config file %s: %s", self._config_file, e)
            return None

    @property
    def config_file(self) -> Path:
        return self._config_file

    @property
    def policy(self) -> NotificationPolicy:
        return self._policy

    def register_observer(self, observer: Observer) -> None:
        """Append an observer. Not safe against a concurrent ``update``."""
        self._observers.append(observer)

    def get_device_configuration(self) -> DeviceConfiguration | None:
        return self._configuration.configuration

    def get_workloads(self) -> tuple[WorkloadSpec, ...]:
        return self._configuration.workloads

    def get_configuration_version(self) -> str:
        version = self._configuration.version
        _logger.debug("Configuration version: %s", version)
        return version

    def get_device_id(self) -> str:
        return self._configuration.device_id

    def get_data_transfer_interval(self) -> timedelta:
        """Policy value for the upstream pull scheduler; not a timer."""
        return DATA_TRANSFER_INTERVAL

    def is_initial_config(self) -> bool:
        """True until the first document has been applied and persisted."""
        return self._initial.is_set()

    def update(self, message: DeviceConfigurationMessage) -> bool:
        """Apply a desired-state document.

        Args:
            message: New desired-state document

        Returns:
            True if observers were notified and the document persisted,
            False if the document did not change

        Raises:
            ConfigurationUpdateError: If an observer rejected the document or
                it could not be persisted. The current document is unchanged.
        """
        initial = self.is_initial_config()
        changed = _change_key(message) != _change_key(self._configuration)
        _logger.debug("Initial config: [%s]; configuration changed: [%s]", initial, changed)

        if not (initial or changed):
            _logger.debug("Configuration didn't change")
            return False

        _logger.debug("Updating configuration to version %r", message.version)
        errors = self._notify_observers(message)
        if errors:
            raise ConfigurationUpdateError(errors) from errors[0]

        # Observers that already applied the document are not compensated on failure
        try:
            self._persist(message)
        except ConfigurationPersistError as e:
            _logger.error("%s", e)
            raise ConfigurationUpdateError([e]) from e

        self._configuration = message
        self._initial.clear()
        _logger.info("Applied configuration version %r", message.version)
        return True

    def _notify_observers(self, message: DeviceConfigurationMessage) -> list[Exception]:
        errors: list[Exception] = []
        for observer in self._observers:
            try:
                observer.update(message)
            except Exception as e:
                _logger.error("Observer %s rejected configuration: %s", type(observer).__name__, e)
                error = ObserverUpdateError(observer, e)
                error.__cause__ = e
                errors.append(error)
                if self._policy is NotificationPolicy.FAIL_FAST:
                    break
        return errors

    def _persist(self, message: DeviceConfigurationMessage) -> None:
        """Write the document through a temp file and an atomic rename."""
        data = message.model_dump_json(indent=2)
        directory = self._config_file.parent
        _logger.debug("Writing config to %s", self._config_file)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".device-config-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(data)
                os.chmod(tmp_name, CONFIG_FILE_MODE)
                os.replace(tmp_name, self._config_file)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise ConfigurationPersistError(
                f"cannot write device config file '{self._config_file}': {e}"
            ) from e

    def deregister(self) -> None:
        """Delete the persisted configuration file.

        In-memory state is left as is.

        Raises:
            OSError: If the file cannot be removed
        """
        _logger.info("Removing device config file: %s", self._config_file)
        try:
            self._config_file.unlink()
        except OSError as e:
            _logger.error("Cannot remove device config file %s: %s", self._config_file, e)
            raise


__all__ = [
    "ConfigurationManager",
    "Observer",
    "NotificationPolicy",
    "CONFIG_FILE_NAME",
    "CONFIG_FILE_MODE",
    "DATA_TRANSFER_INTERVAL",
]
