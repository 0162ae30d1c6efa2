"""Coordinated rendering of nested progress bars.

Every visible tracker is one task of a shared ``rich.progress.Progress``.
While a folder run is active, the folder bar and the bar of the document
being processed sit in the same live display, ordered by label, so the two
never interleave mid-line. Log records are printed through the same console
and land above the bars.

The coordinator is an ordinary object owned by the CLI and handed to the
components that need it; nothing here is process-global.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING, TextIO

from rich.console import Console
from rich.progress import BarColumn, Progress, Task, TaskID, TaskProgressColumn, TextColumn
from rich.table import Table

from ..constants import PROGRESS_BAR_WIDTH

if TYPE_CHECKING:
    from .tracker import ProgressTracker

logger = logging.getLogger(__name__)


class LabelOrderedProgress(Progress):
    """Progress display whose rows are sorted by task description."""

    def make_tasks_table(self, tasks: Iterable[Task]) -> Table:
        return super().make_tasks_table(sorted(tasks, key=lambda task: task.description))


def build_progress(console: Console) -> LabelOrderedProgress:
    # Labels are file names; brackets in them must not be read as markup
    return LabelOrderedProgress(
        TextColumn("{task.description}", markup=False),
        BarColumn(bar_width=PROGRESS_BAR_WIDTH),
        TaskProgressColumn(),
        TextColumn("({task.fields[counts]})", markup=False),
        TextColumn("{task.fields[eta]} {task.fields[rate]}", markup=False),
        console=console,
        transient=True,
        redirect_stdout=False,
        redirect_stderr=False,
    )


class ProgressCoordinator:
    """Registry of concurrently visible progress trackers.

    Outside folder mode the live display exists only while some tracker is
    running. Between ``enable()`` and ``disable()`` it stays up, so the
    folder bar and each document bar share it.

    Args:
        stream: Text stream for the console (defaults to stderr)
        console: Console to draw on; overrides ``stream``

    Example:
        >>> coordinator = ProgressCoordinator()
        >>> coordinator.enable()
        >>> folder = FolderProgressTracker("Folder OCR", queue.metrics, coordinator=coordinator).start()
        >>> doc = ProgressTracker("PDF report.pdf", 12, coordinator=coordinator).start()
        >>> doc.increment()   # updates the document row
        >>> coordinator.disable()
    """

    def __init__(self, stream: TextIO | None = None, console: Console | None = None):
        if console is None:
            console = Console(file=stream) if stream is not None else Console(stderr=True)
        self.console = console
        self._lock = threading.RLock()
        self._active = False
        self._registered: list[ProgressTracker] = []
        self._tasks: dict[ProgressTracker, TaskID] = {}
        self._progress: LabelOrderedProgress | None = None

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    @property
    def active(self) -> bool:
        return self._active

    @property
    def progress(self) -> LabelOrderedProgress | None:
        """The live display, while one is running."""
        return self._progress

    # ==================== Lifecycle ====================

    def enable(self) -> None:
        """Enter folder mode: the live display outlives individual trackers."""
        with self._lock:
            self._active = True

    def disable(self) -> None:
        """Leave folder mode, clear the registry and take the bars down."""
        with self._lock:
            self._active = False
            self._registered.clear()
            self._tasks.clear()
            self._stop_display()

    def register(self, tracker: ProgressTracker) -> None:
        with self._lock:
            if tracker in self._registered:
                return
            self._registered.append(tracker)
            if tracker.visible:
                progress = self._start_display()
                self._tasks[tracker] = progress.add_task(
                    tracker.label, total=100, completed=tracker.percent(), **tracker.fields()
                )

    def unregister(self, tracker: ProgressTracker) -> None:
        with self._lock:
            if tracker in self._registered:
                self._registered.remove(tracker)
            task_id = self._tasks.pop(tracker, None)
            if task_id is not None and self._progress is not None:
                self._progress.remove_task(task_id)
            if not self._active and not self._tasks:
                self._stop_display()

    def is_registered(self, tracker: ProgressTracker) -> bool:
        return tracker in self._registered

    def trackers(self) -> list[ProgressTracker]:
        """Registered trackers in render order."""
        with self._lock:
            return sorted(self._registered, key=lambda t: t.label)

    # ==================== Rendering ====================

    def update(self, tracker: ProgressTracker) -> None:
        """Push the tracker's current counters to its row."""
        with self._lock:
            task_id = self._tasks.get(tracker)
            if task_id is None or self._progress is None:
                return
            self._progress.update(task_id, completed=tracker.percent(), **tracker.fields())

    def refresh(self) -> None:
        with self._lock:
            if self._progress is not None:
                self._progress.refresh()

    def _start_display(self) -> LabelOrderedProgress:
        if self._progress is None:
            self._progress = build_progress(self.console)
            self._progress.start()
        return self._progress

    def _stop_display(self) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
