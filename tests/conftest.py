"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from device_worker.configuration.models import WorkloadSpec
from device_worker.workloads.exceptions import RuntimeAdapterError
from device_worker.workloads.models import WorkloadInfo, WorkloadStatus

POD_SPEC = """\
containers:
  - name: app
    image: quay.io/example/app:latest
    ports:
      - containerPort: 8080
"""


class FakeRuntime:
    """In-memory WorkloadRuntime that records every call.

    ``failures`` maps (operation, workload name) to the exception that
    operation should raise; use "*" as the name to fail for any workload.
    """

    def __init__(self) -> None:
        self.pods: dict[str, str] = {}
        self.calls: list[tuple[str, ...]] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    def _check(self, operation: str, name: str) -> None:
        error = self.failures.get((operation, name)) or self.failures.get((operation, "*"))
        if error is not None:
            raise error

    def list(self):
        self.calls.append(("list",))
        self._check("list", "*")
        return [WorkloadInfo(id=f"id-{n}", name=n, status=s) for n, s in self.pods.items()]

    def run(self, manifest_path):
        manifest_path = Path(manifest_path)
        name = yaml.safe_load(manifest_path.read_text())["metadata"]["name"]
        self.calls.append(("run", str(manifest_path)))
        self._check("run", name)
        self.pods[name] = WorkloadStatus.RUNNING.value

    def start(self, name):
        self.calls.append(("start", name))
        self._check("start", name)
        self.pods[name] = WorkloadStatus.RUNNING.value

    def remove(self, name):
        self.calls.append(("remove", name))
        self._check("remove", name)
        self.pods.pop(name, None)

    def calls_of(self, operation: str) -> list[tuple[str, ...]]:
        return [c for c in self.calls if c[0] == operation]


@pytest.fixture()
def runtime():
    return FakeRuntime()


@pytest.fixture()
def runtime_error():
    return RuntimeAdapterError("runtime unavailable")


def make_workload(name: str, specification: str = POD_SPEC) -> WorkloadSpec:
    return WorkloadSpec(name=name, specification=specification)
