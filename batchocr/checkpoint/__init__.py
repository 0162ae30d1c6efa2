"""Filesystem checkpoint detection for skip-on-resume."""

from .oracle import CheckpointOracle, PageArtifactPaths, exists, exists_non_empty

__all__ = ["CheckpointOracle", "PageArtifactPaths", "exists", "exists_non_empty"]
