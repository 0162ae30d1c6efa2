"""Folder batch processing.

This module provides:
- WorkQueue: Unbounded unit queue with live scope counters
- DiscoveryScanner: Background producer walking the input root
- estimate_unit, classify: Unit classification and page estimation
- ProgressMetrics, BatchSummary: Progress snapshot and run summary
- FolderBatchProcessor: Consumes the queue and dispatches units
"""

from .discovery import DiscoveryScanner, list_supported_files
from .estimator import classify, estimate_unit
from .processor import FolderBatchProcessor
from .queue import MonotonicCounter, WorkQueue
from .types import BatchSummary, ProgressMetrics, reliability_label

__all__ = [
    "DiscoveryScanner",
    "list_supported_files",
    "classify",
    "estimate_unit",
    "FolderBatchProcessor",
    "MonotonicCounter",
    "WorkQueue",
    "BatchSummary",
    "ProgressMetrics",
    "reliability_label",
]
