"""Unit processing: single images, multi-page documents, worker pool and merging."""

from .image import ImageProcessor
from .merge import MergeStage, PageArtifact, load_page_artifact, merge_artifacts, rebuild_from_disk
from .pdf import DocumentProcessor
from .workers import WorkerPool

__all__ = [
    "ImageProcessor",
    "DocumentProcessor",
    "MergeStage",
    "PageArtifact",
    "WorkerPool",
    "load_page_artifact",
    "merge_artifacts",
    "rebuild_from_disk",
]
