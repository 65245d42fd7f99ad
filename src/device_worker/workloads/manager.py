"""Workload Manager - drives the container runtime toward the desired workloads.

Two paths change the runtime:

* ``update``/``apply`` (push): called by the configuration manager when the
  desired state changes. Rewrites manifests and re-runs workloads, failing
  fast on the first error.
* ``reconcile`` (pull): a periodic sweep that restarts stopped workloads and
  re-runs missing ones from their manifests. Failures are isolated per
  manifest.

Both paths hold the same lock, so a push never interleaves with a sweep.
The sweep does not detect orphans in either direction: manifests removed
outside ``apply`` and runtime pods without a manifest are left alone.

Public API (the "studs"):
    WorkloadManager: Observer that owns the manifest store and runtime handle
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Sequence
from pathlib import Path

from ..configuration.models import DeviceConfigurationMessage, WorkloadSpec
from .exceptions import ManifestError
from .manifests import ManifestStore
from .models import ReconcileReport, WorkloadInfo
from .runtime import WorkloadRuntime

_logger = logging.getLogger(__name__)

RECONCILE_INTERVAL_SECONDS = 15.0


class WorkloadManager:
    """Owns the manifest store and runtime adapter; reconciles them periodically."""

    def __init__(
        self,
        config_dir: Path | str,
        runtime: WorkloadRuntime,
        interval_seconds: float = RECONCILE_INTERVAL_SECONDS,
        auto_start: bool = True,
    ) -> None:
        """Initialize the manager.

        Args:
            config_dir: Directory under which manifests/ is created
            runtime: Container runtime adapter
            interval_seconds: Delay between reconciliation sweeps
            auto_start: Start the reconciliation loop immediately

        Raises:
            OSError: If the manifest directory cannot be created
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self._manifests = ManifestStore(Path(config_dir) / "manifests")
        self._runtime = runtime
        self._interval = interval_seconds
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        if auto_start:
            self.start()

    @property
    def manifests(self) -> ManifestStore:
        return self._manifests

    # -------- lifecycle --------

    def start(self) -> None:
        """Start the background reconciliation loop (no-op if running)."""
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._reconcile_loop, name="WorkloadReconciler", daemon=True
        )
        self._thread.start()
        _logger.info("Reconciliation loop started (interval %.1fs)", self._interval)

    def stop(self, timeout: float | None = None) -> None:
        """Stop the reconciliation loop and wait for the current sweep to end."""
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
            _logger.info("Reconciliation loop stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def __enter__(self) -> WorkloadManager:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _reconcile_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.reconcile()
            except Exception as e:
                _logger.error("Reconciliation failed: %s", e)
            self._stop_event.wait(self._interval)

    # -------- push path --------

    def update(self, configuration: DeviceConfigurationMessage) -> None:
        """Observer entry point: apply the document's workloads."""
        self.apply(configuration.workloads)

    def apply(self, workloads: Sequence[WorkloadSpec]) -> None:
        """Make the runtime and manifest directory match ``workloads``.

        An empty sequence purges every runtime workload and every manifest.
        Otherwise each workload is written, removed from the runtime and
        run again, in order; then workloads whose manifests are no longer
        desired are removed from the runtime along with their manifests.
        The first failure aborts the call; workloads processed before it
        stay applied.

        Raises:
            WorkloadError: On the first manifest or runtime failure
            OSError: If a manifest cannot be removed
        """
        with self._lock:
            if not workloads:
                _logger.debug("No workloads")
                self._purge_workloads()
                self._manifests.purge()
                return

            desired: set[Path] = set()
            for workload in workloads:
                _logger.debug("Deploying workload: %s", workload.name)
                manifest_path = self._manifests.store(workload)
                desired.add(manifest_path)
                self._runtime.remove(workload.name)
                self._runtime.run(manifest_path)

            self._remove_undesired(desired)

    def _remove_undesired(self, desired: set[Path]) -> None:
        """Remove manifests outside ``desired`` and their runtime workloads."""
        for path in self._manifests.list_manifests():
            if path in desired:
                continue
            try:
                name = self._manifests.load(path).name
            except ManifestError as e:
                # Unreadable manifests name no workload; only the file goes
                _logger.warning("Removing unreadable manifest %s: %s", path, e)
            else:
                _logger.debug("Removing workload no longer desired: %s", name)
                self._runtime.remove(name)
            path.unlink()

    def _purge_workloads(self) -> None:
        for workload in self._runtime.list():
            self._runtime.remove(workload.name)

    def list_workloads(self) -> list[WorkloadInfo]:
        return self._runtime.list()

    # -------- pull path --------

    def reconcile(self) -> ReconcileReport:
        """Run one reconciliation sweep over the manifest directory.

        Returns:
            Report of the actions taken and per-manifest failures

        Raises:
            OSError: If the manifest directory cannot be listed
            RuntimeAdapterError: If the runtime listing fails
        """
        started_at = time.monotonic()
        report = ReconcileReport()
        with self._lock:
            manifest_paths = self._manifests.list_manifests()
            name_to_workload = {w.name: w for w in self._runtime.list()}

            for path in manifest_paths:
                try:
                    name = self._manifests.load(path).name
                except Exception as e:
                    _logger.warning("Skipping manifest %s: %s", path, e)
                    report.errors.append(f"{path.name}: {e}")
                    continue

                workload = name_to_workload.get(name)
                try:
                    if workload is None:
                        # Not present: first run or removed outside the agent
                        self._runtime.run(path)
                        report.ran.append(name)
                    elif not workload.is_running:
                        self._runtime.start(name)
                        report.started.append(name)
                    else:
                        report.skipped.append(name)
                except Exception as e:
                    _logger.warning("Cannot reconcile workload %s: %s", name, e)
                    report.errors.append(f"{name}: {e}")

        report.duration_seconds = time.monotonic() - started_at
        if report.ran or report.started or report.errors:
            _logger.info(
                "Reconciled workloads: ran=%s started=%s errors=%d",
                report.ran,
                report.started,
                len(report.errors),
            )
        return report


__all__ = ["WorkloadManager", "RECONCILE_INTERVAL_SECONDS"]
