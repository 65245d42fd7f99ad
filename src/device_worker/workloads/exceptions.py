"""Exceptions for workload management.

Public API (the "studs"):
    WorkloadError: Base exception for workload errors
    ManifestError: A manifest could not be rendered, read, or parsed
    RuntimeAdapterError: A container runtime operation failed
"""


class WorkloadError(Exception):
    """Base exception for all workload errors."""

    pass


class ManifestError(WorkloadError):
    """A manifest could not be rendered, read, or parsed."""

    pass


class RuntimeAdapterError(WorkloadError):
    """A container runtime operation failed."""

    pass


__all__ = [
    "WorkloadError",
    "ManifestError",
    "RuntimeAdapterError",
]
