"""Tests for PodmanRuntime - the podman CLI adapter."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from device_worker.workloads.exceptions import RuntimeAdapterError
from device_worker.workloads.podman import PodmanRuntime
from device_worker.workloads.runtime import WorkloadRuntime


def _completed(stdout="", returncode=0, stderr=""):
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


class TestPodmanRuntime:
    """Tests for podman command construction and output parsing."""

    def test_satisfies_protocol(self):
        assert isinstance(PodmanRuntime(), WorkloadRuntime)

    def test_list_parses_pods(self):
        pods = [
            {"Id": "abc", "Name": "app", "Status": "Running"},
            {"Id": "def", "Name": "db", "Status": "Exited"},
        ]
        with patch("subprocess.run", return_value=_completed(json.dumps(pods))) as mock_run:
            infos = PodmanRuntime().list()

        assert mock_run.call_args[0][0] == ["podman", "pod", "ps", "--format", "json"]
        assert [(i.id, i.name, i.status) for i in infos] == [
            ("abc", "app", "Running"),
            ("def", "db", "Exited"),
        ]
        assert infos[0].is_running is True
        assert infos[1].is_running is False

    @pytest.mark.parametrize("output", ["", "null", "\n"])
    def test_list_empty_output(self, output):
        with patch("subprocess.run", return_value=_completed(output)):
            assert PodmanRuntime().list() == []

    def test_list_unparseable_output(self):
        with patch("subprocess.run", return_value=_completed("not json")):
            with pytest.raises(RuntimeAdapterError, match="cannot parse"):
                PodmanRuntime().list()

    def test_run_plays_manifest(self):
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            PodmanRuntime(binary="/usr/bin/podman").run(Path("/etc/dw/manifests/app.yaml"))
        assert mock_run.call_args[0][0] == [
            "/usr/bin/podman",
            "play",
            "kube",
            "/etc/dw/manifests/app.yaml",
        ]

    def test_start(self):
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            PodmanRuntime().start("app")
        assert mock_run.call_args[0][0] == ["podman", "pod", "start", "app"]

    def test_remove_is_idempotent(self):
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            PodmanRuntime().remove("app")
        assert mock_run.call_args[0][0] == ["podman", "pod", "rm", "--force", "--ignore", "app"]

    def test_passes_timeout(self):
        with patch("subprocess.run", return_value=_completed()) as mock_run:
            PodmanRuntime(timeout_seconds=7).start("app")
        assert mock_run.call_args[1]["timeout"] == 7

    def test_non_zero_exit_raises(self):
        failed = _completed(returncode=125, stderr="Error: no pod with name or ID app found")
        with patch("subprocess.run", return_value=failed):
            with pytest.raises(RuntimeAdapterError, match="exit code 125"):
                PodmanRuntime().start("app")

    def test_timeout_raises(self):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired("podman", 1)):
            with pytest.raises(RuntimeAdapterError, match="timed out"):
                PodmanRuntime().remove("app")

    def test_missing_binary_raises(self):
        with patch("subprocess.run", side_effect=FileNotFoundError("podman")):
            with pytest.raises(RuntimeAdapterError, match="cannot execute"):
                PodmanRuntime().list()
