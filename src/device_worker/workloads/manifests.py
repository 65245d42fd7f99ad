"""Manifest Store - on-disk pod manifests, one file per workload.

Public API (the "studs"):
    ManifestStore: Render, write, list, read and purge manifest files
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..configuration.models import WorkloadSpec
from .exceptions import ManifestError
from .models import ManifestMetadata, PodManifest

_logger = logging.getLogger(__name__)

MANIFEST_EXTENSION = ".yaml"
MANIFEST_FILE_MODE = 0o640
MANIFESTS_DIR_MODE = 0o755


def _manifest_file_name(workload_name: str) -> str:
    """Map a workload name to its manifest file name.

    Spaces become hyphens. Names that could escape the manifest
    directory are rejected.

    Raises:
        ManifestError: If the name is empty or contains path traversal
    """
    if not workload_name:
        raise ManifestError("workload name must not be empty")
    if "/" in workload_name or "\\" in workload_name:
        raise ManifestError(f"workload name contains path separators: {workload_name!r}")
    if ".." in workload_name:
        raise ManifestError(f"workload name contains path traversal: {workload_name!r}")
    return workload_name.replace(" ", "-") + MANIFEST_EXTENSION


class ManifestStore:
    """Directory of rendered pod manifests keyed by sanitized workload name."""

    def __init__(self, manifests_dir: Path | str) -> None:
        """Initialize the store, creating the directory if needed.

        Args:
            manifests_dir: Directory for manifest files

        Raises:
            OSError: If the directory cannot be created
        """
        self._dir = Path(manifests_dir)
        self._dir.mkdir(mode=MANIFESTS_DIR_MODE, parents=True, exist_ok=True)

    @property
    def directory(self) -> Path:
        return self._dir

    def manifest_path(self, workload_name: str) -> Path:
        return self._dir / _manifest_file_name(workload_name)

    def render(self, workload: WorkloadSpec) -> PodManifest:
        """Parse a workload's pod spec and wrap it with identity metadata.

        Raises:
            ManifestError: If the specification is not a YAML mapping
        """
        try:
            spec: Any = yaml.safe_load(workload.specification) if workload.specification else None
        except yaml.YAMLError as e:
            raise ManifestError(f"invalid specification for workload {workload.name!r}: {e}") from e
        if spec is None:
            spec = {}
        if not isinstance(spec, dict):
            raise ManifestError(
                f"specification for workload {workload.name!r} must be a mapping, "
                f"got {type(spec).__name__}"
            )
        return PodManifest(metadata=ManifestMetadata(name=workload.name), spec=spec)

    def store(self, workload: WorkloadSpec) -> Path:
        """Render a workload and write its manifest, replacing any previous one.

        Returns:
            Path of the written manifest

        Raises:
            ManifestError: If the workload cannot be rendered or written
        """
        path = self.manifest_path(workload.name)
        manifest = self.render(workload)
        content = yaml.safe_dump(manifest.model_dump(by_alias=True), sort_keys=False)
        try:
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, MANIFEST_FILE_MODE)
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(path, MANIFEST_FILE_MODE)
        except OSError as e:
            raise ManifestError(f"cannot write manifest {path}: {e}") from e
        _logger.debug("Stored manifest for workload %s at %s", workload.name, path)
        return path

    def list_manifests(self) -> list[Path]:
        """List manifest files, sorted by name.

        Raises:
            OSError: If the directory cannot be read
        """
        return sorted(p for p in self._dir.iterdir() if p.is_file())

    def load(self, path: Path | str) -> PodManifest:
        """Read and validate a manifest file.

        Raises:
            ManifestError: If the file cannot be read or is not a valid manifest
        """
        path = Path(path)
        try:
            raw = path.read_text()
        except OSError as e:
            raise ManifestError(f"cannot read manifest {path}: {e}") from e
        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ManifestError(f"invalid manifest {path}: {e}") from e
        if not isinstance(data, dict):
            raise ManifestError(f"invalid manifest {path}: expected a mapping")
        try:
            return PodManifest.model_validate(data)
        except ValidationError as e:
            raise ManifestError(f"invalid manifest {path}: {e}") from e

    def purge(self) -> None:
        """Delete every file in the manifest directory.

        Raises:
            OSError: On the first file that cannot be removed
        """
        for path in sorted(self._dir.iterdir()):
            path.unlink()
            _logger.debug("Removed manifest %s", path)


__all__ = ["ManifestStore", "MANIFEST_EXTENSION", "MANIFEST_FILE_MODE"]
