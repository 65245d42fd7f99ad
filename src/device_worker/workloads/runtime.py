"""Runtime protocol - the contract the workload manager expects from a container runtime.

Public API (the "studs"):
    WorkloadRuntime: Protocol for list/run/start/remove over named workloads
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import WorkloadInfo


@runtime_checkable
class WorkloadRuntime(Protocol):
    """Protocol defining container runtime operations over named workloads.

    Implementations raise RuntimeAdapterError when an operation fails.
    """

    def list(self) -> list[WorkloadInfo]:
        """List workloads known to the runtime."""
        ...

    def run(self, manifest_path: Path) -> None:
        """Create and start a workload from a manifest file."""
        ...

    def start(self, name: str) -> None:
        """Start an existing, stopped workload."""
        ...

    def remove(self, name: str) -> None:
        """Remove a workload by name."""
        ...


__all__ = ["WorkloadRuntime"]
