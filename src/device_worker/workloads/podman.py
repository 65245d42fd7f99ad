"""Podman-backed WorkloadRuntime.

Drives pods through the podman CLI. Each workload is a pod created
from its manifest with ``podman play kube``.

Public API (the "studs"):
    PodmanRuntime: WorkloadRuntime implementation using the podman CLI
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path

from .exceptions import RuntimeAdapterError
from .models import WorkloadInfo

_logger = logging.getLogger(__name__)


class PodmanRuntime:
    """WorkloadRuntime implementation using the podman CLI."""

    def __init__(self, binary: str = "podman", timeout_seconds: float = 120) -> None:
        """Initialize PodmanRuntime.

        Args:
            binary: podman executable name or path
            timeout_seconds: Upper bound for a single podman invocation
        """
        self._binary = binary
        self._timeout = timeout_seconds

    def _podman(self, *args: str) -> str:
        """Run a podman command and return its stdout.

        Raises:
            RuntimeAdapterError: If podman is missing, times out or fails
        """
        command = [self._binary, *args]
        _logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired:
            raise RuntimeAdapterError(
                f"podman {args[0]} timed out after {self._timeout} seconds"
            ) from None
        except OSError as e:
            raise RuntimeAdapterError(f"cannot execute {self._binary}: {e}") from e
        if result.returncode != 0:
            _logger.debug("podman stderr: %s", result.stderr)
            raise RuntimeAdapterError(
                f"podman {' '.join(args)} failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return result.stdout

    def list(self) -> list[WorkloadInfo]:
        output = self._podman("pod", "ps", "--format", "json")
        if not output.strip():
            return []
        try:
            pods = json.loads(output)
        except json.JSONDecodeError as e:
            raise RuntimeAdapterError(f"cannot parse podman pod listing: {e}") from e
        if pods is None:
            return []
        return [
            WorkloadInfo(id=pod.get("Id", ""), name=pod["Name"], status=pod.get("Status", ""))
            for pod in pods
            if pod.get("Name")
        ]

    def run(self, manifest_path: Path) -> None:
        self._podman("play", "kube", str(manifest_path))
        _logger.info("Started workload from %s", manifest_path)

    def start(self, name: str) -> None:
        self._podman("pod", "start", name)
        _logger.info("Started workload %s", name)

    def remove(self, name: str) -> None:
        # --ignore makes removal of a missing pod a no-op
        self._podman("pod", "rm", "--force", "--ignore", name)
        _logger.debug("Removed workload %s", name)


__all__ = ["PodmanRuntime"]
