"""Artifact discovery."""

from infbench.catalog.artifact_catalog import ArtifactCatalog

__all__ = ["ArtifactCatalog"]
