"""Desired-state configuration: models, persistence and observer fan-out."""

from .exceptions import (
    ConfigurationError,
    ConfigurationPersistError,
    ConfigurationUpdateError,
    ObserverUpdateError,
)
from .manager import ConfigurationManager, NotificationPolicy, Observer
from .models import (
    DEFAULT_CONFIGURATION_MESSAGE,
    DeviceConfiguration,
    DeviceConfigurationMessage,
    HardwareProfileConfiguration,
    HeartbeatConfiguration,
    WorkloadSpec,
)

__all__ = [
    "ConfigurationManager",
    "NotificationPolicy",
    "Observer",
    "ConfigurationError",
    "ConfigurationPersistError",
    "ConfigurationUpdateError",
    "ObserverUpdateError",
    "DEFAULT_CONFIGURATION_MESSAGE",
    "DeviceConfiguration",
    "DeviceConfigurationMessage",
    "HardwareProfileConfiguration",
    "HeartbeatConfiguration",
    "WorkloadSpec",
]
