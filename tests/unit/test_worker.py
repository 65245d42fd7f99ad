"""End-to-end tests for DeviceWorker wiring."""

import json

import pytest
from conftest import POD_SPEC

from device_worker.configuration.exceptions import ConfigurationUpdateError
from device_worker.settings import WorkerSettings
from device_worker.worker import DeviceWorker


@pytest.fixture()
def settings(tmp_path):
    return WorkerSettings(data_dir=tmp_path / "data", config_dir=tmp_path / "etc")


def _write_document(path, workloads, version="1"):
    path.write_text(
        json.dumps(
            {
                "version": version,
                "configuration": {"heartbeat": {"period_seconds": 60}},
                "workloads": [{"name": n, "specification": POD_SPEC} for n in workloads],
            }
        )
    )
    return path


class TestDeviceWorker:
    """Tests for the wired configuration and workload managers."""

    def test_first_document_end_to_end(self, settings, runtime, tmp_path):
        worker = DeviceWorker(settings, runtime=runtime)
        assert worker.configuration.is_initial_config() is True
        assert worker.configuration.get_device_configuration().heartbeat.period_seconds == 60

        applied = worker.apply_file(_write_document(tmp_path / "desired.json", ["app"]))

        manifest = settings.config_dir / "manifests" / "app.yaml"
        assert applied is True
        assert manifest.exists()
        assert runtime.calls == [("remove", "app"), ("run", str(manifest))]
        assert '"app"' in worker.configuration.config_file.read_text()
        assert worker.configuration.is_initial_config() is False

        runtime.calls.clear()
        report = worker.workloads.reconcile()
        assert runtime.calls == [("list",)]
        assert report.skipped == ["app"]

    def test_reconcile_loop_not_started_by_constructor(self, settings, runtime):
        worker = DeviceWorker(settings, runtime=runtime)
        assert worker.workloads.running is False
        with worker:
            worker.start()
            assert worker.workloads.running is True
        assert worker.workloads.running is False

    def test_workload_failure_prevents_persist(self, settings, runtime, runtime_error, tmp_path):
        runtime.failures[("run", "app")] = runtime_error
        worker = DeviceWorker(settings, runtime=runtime)

        with pytest.raises(ConfigurationUpdateError, match="runtime unavailable"):
            worker.apply_file(_write_document(tmp_path / "desired.json", ["app"]))

        assert not worker.configuration.config_file.exists()
        assert worker.configuration.is_initial_config() is True

    def test_restart_restores_state(self, settings, runtime, tmp_path):
        DeviceWorker(settings, runtime=runtime).apply_file(
            _write_document(tmp_path / "desired.json", ["app", "db"], version="4")
        )
        restarted = DeviceWorker(settings, runtime=runtime)
        assert restarted.configuration.is_initial_config() is False
        assert restarted.configuration.get_configuration_version() == "4"

        runtime.calls.clear()
        assert restarted.apply_file(tmp_path / "desired.json") is False
        assert runtime.calls == []

    def test_empty_document_purges(self, settings, runtime, tmp_path):
        worker = DeviceWorker(settings, runtime=runtime)
        worker.apply_file(_write_document(tmp_path / "desired.json", ["app", "db"]))
        worker.apply_file(_write_document(tmp_path / "empty.json", [], version="2"))

        assert list((settings.config_dir / "manifests").iterdir()) == []
        assert worker.workloads.list_workloads() == []
        assert worker.configuration.get_workloads() == ()
