# infbench/catalog/artifact_catalog.py

"""Artifact catalog.

An artifact is a file *or* a directory (compiled bundles) under one storage
root whose suffix matches a fixed extension. Ids are names with the
extension stripped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

from infbench.bench.errors import ModelLoadFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArtifactCatalog:
    root: Path
    extension: str

    @staticmethod
    def make(root: str | Path, extension: str) -> "ArtifactCatalog":
        ext = extension if extension.startswith(".") else f".{extension}"
        return ArtifactCatalog(root=Path(root), extension=ext)

    def list_artifacts(self) -> List[str]:
        """Artifact ids under `root`, sorted by name; [] when nothing is there."""
        if not self.root.is_dir():
            logger.debug("artifact root %s does not exist", self.root)
            return []
        names = [p.name[: -len(self.extension)]
                 for p in self.root.iterdir()
                 if p.name.endswith(self.extension) and len(p.name) > len(self.extension)]
        return sorted(names)

    def resolve(self, artifact_id: str) -> Path:
        """Path of an artifact id; ModelLoadFailure when it is not in the catalog."""
        if not artifact_id:
            raise ModelLoadFailure("no model selected")
        p = self.root / f"{artifact_id}{self.extension}"
        if Path(artifact_id).name != artifact_id or not p.exists():
            raise ModelLoadFailure(f"artifact {artifact_id!r} not found in {self.root}")
        return p
