"""Desired-state data models.

The desired-state document is what the control plane pushes to a device:
operational settings plus the ordered list of workloads that should run.
All models are frozen so a document can be shared between the
configuration manager and its observers without defensive copies.
"""

from pydantic import BaseModel, Field


class HardwareProfileConfiguration(BaseModel):
    """Which hardware details the heartbeat should report."""

    include: bool = Field(default=False, description="Report hardware profile in heartbeats")
    scope: str = Field(default="", description="Hardware profile scope (e.g. 'full', 'delta')")

    class Config:
        frozen = True


class HeartbeatConfiguration(BaseModel):
    """Heartbeat settings for the device."""

    period_seconds: int = Field(default=60, ge=1, description="Heartbeat period in seconds")
    hardware_profile: HardwareProfileConfiguration = Field(
        default_factory=HardwareProfileConfiguration, description="Hardware profile settings"
    )

    class Config:
        frozen = True


class DeviceConfiguration(BaseModel):
    """Operational settings block of a desired-state document."""

    heartbeat: HeartbeatConfiguration | None = Field(default=None, description="Heartbeat settings")

    class Config:
        frozen = True


class WorkloadSpec(BaseModel):
    """A single desired workload.

    ``specification`` is the raw pod spec text (YAML or JSON). Name
    uniqueness within a document is the sender's responsibility.
    """

    name: str = Field(..., min_length=1, description="Workload name")
    specification: str = Field(default="", description="Raw pod spec text")

    class Config:
        frozen = True


class DeviceConfigurationMessage(BaseModel):
    """Versioned desired-state document.

    ``version`` is opaque and only reported for observability; it plays
    no part in change detection.
    """

    device_id: str = Field(default="", description="Device the document is addressed to")
    version: str = Field(default="", description="Opaque configuration version")
    configuration: DeviceConfiguration | None = Field(
        default=None, description="Operational settings"
    )
    workloads: tuple[WorkloadSpec, ...] = Field(
        default_factory=tuple, description="Desired workloads, in apply order"
    )

    class Config:
        frozen = True


DEFAULT_CONFIGURATION_MESSAGE = DeviceConfigurationMessage(
    configuration=DeviceConfiguration(
        heartbeat=HeartbeatConfiguration(
            period_seconds=60,
            hardware_profile=HardwareProfileConfiguration(),
        )
    )
)


__all__ = [
    "HardwareProfileConfiguration",
    "HeartbeatConfiguration",
    "DeviceConfiguration",
    "WorkloadSpec",
    "DeviceConfigurationMessage",
    "DEFAULT_CONFIGURATION_MESSAGE",
]
