"""Progress reporting: trackers, nested-bar coordination and progress-aware logging."""

from .coordinator import ProgressCoordinator
from .logging import CategoryFormatter, ProgressAwareHandler, StepLogger, setup_console_logging
from .tracker import FolderProgressTracker, ProgressTracker

__all__ = [
    "ProgressCoordinator",
    "ProgressTracker",
    "FolderProgressTracker",
    "CategoryFormatter",
    "ProgressAwareHandler",
    "StepLogger",
    "setup_console_logging",
]
