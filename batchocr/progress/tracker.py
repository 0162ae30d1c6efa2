"""Progress trackers: counters, ETA and rate behind one row of the live display."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..constants import RATE_WINDOW_SECONDS
from ..misc import format_duration
from .coordinator import ProgressCoordinator

if TYPE_CHECKING:
    from ..batch.types import ProgressMetrics

logger = logging.getLogger(__name__)


class ProgressTracker:
    """Counts completed items of a task and feeds its progress row.

    Attributes:
        label: Task label, also the render order key under a coordinator
        visible: Whether the row is drawn at all (defaults to the console being a terminal)

    Example:
        >>> tracker = ProgressTracker("PDF report.pdf", total=12).start()
        >>> for page in pages:
        ...     process(page)
        ...     tracker.increment()
        >>> tracker.done()
    """

    def __init__(
        self,
        label: str,
        total: int,
        coordinator: ProgressCoordinator | None = None,
        visible: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.label = label
        self._total = max(0, total)
        self._completed = 0
        self._lock = threading.Lock()
        self.coordinator = coordinator if coordinator is not None else ProgressCoordinator()
        self.visible = self.coordinator.console.is_terminal if visible is None else visible
        self._clock = clock
        self._paused = False
        self._started = False
        self._start_time = clock()
        self._window_time = self._start_time
        self._window_count = 0
        self._recent_rate: float | None = None

    # ==================== Accessors ====================

    def completed(self) -> int:
        return self._completed

    def total(self) -> int:
        return self._total

    @property
    def paused(self) -> bool:
        return self._paused

    def elapsed(self) -> float:
        return self._clock() - self._start_time

    def percent(self) -> float:
        total = self.total()
        if total <= 0:
            return 0.0
        return min(100.0, self.completed() * 100.0 / total)

    # ==================== Lifecycle ====================

    def start(self) -> ProgressTracker:
        """Reset the clock and add the row to the coordinator's display."""
        self._start_time = self._window_time = self._clock()
        self._started = True
        self.coordinator.register(self)
        return self

    def increment(self, amount: int = 1) -> int:
        with self._lock:
            self._completed += amount
            now = self._clock()
            if now - self._window_time >= RATE_WINDOW_SECONDS:
                self._recent_rate = (self._completed - self._window_count) / (now - self._window_time)
                self._window_time = now
                self._window_count = self._completed
            completed = self._completed
        self._show()
        return completed

    def pause(self) -> None:
        """Stop pushing updates to the row; counting continues."""
        self._paused = True

    def resume(self) -> None:
        if self._paused:
            self._paused = False
            self._show()

    def done(self) -> None:
        """Finish the task: remove the row and log a completion line."""
        self.coordinator.unregister(self)
        logger.info(
            "%s completed (%d items) in %s",
            self.label,
            self.completed(),
            format_duration(self.elapsed()),
            extra={"kind": "success"},
        )

    def fail(self, message: str) -> None:
        self.coordinator.unregister(self)
        logger.error("Error in %s: %s", self.label, message)

    # ==================== Row fields ====================

    def eta_text(self) -> str:
        completed = self.completed()
        if completed <= 0:
            return "ETA: --:--"
        remaining = max(0, self.total() - completed)
        return f"ETA: {format_duration(self.elapsed() / completed * remaining)}"

    def rate_text(self) -> str:
        elapsed = self.elapsed()
        if self._recent_rate is not None:
            rate = self._recent_rate
        elif elapsed >= 1.0:
            rate = self.completed() / elapsed
        else:
            return "--/s"
        if rate >= 1.0:
            return f"{rate:.1f}/s"
        return f"{rate * 60:.1f}/min"

    def counts_text(self) -> str:
        return f"{self.completed()}/{self.total()}"

    def fields(self) -> dict[str, str]:
        """Custom task fields read by the display columns."""
        return {"counts": self.counts_text(), "eta": self.eta_text(), "rate": self.rate_text()}

    def _show(self) -> None:
        if self._started and not self._paused:
            self.coordinator.update(self)


class FolderProgressTracker(ProgressTracker):
    """Folder-level tracker whose total grows while discovery runs.

    The percentage comes from the work queue's best available metric
    (pages, bytes or file count) rather than from the unit counter alone.
    """

    def __init__(
        self,
        label: str,
        metrics: Callable[[], ProgressMetrics],
        total: int = 0,
        coordinator: ProgressCoordinator | None = None,
        visible: bool | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(label, total, coordinator=coordinator, visible=visible, clock=clock)
        self._metrics = metrics

    def update_total(self, discovered: int) -> None:
        """Raise the total to ``discovered`` if discovery found more units."""
        with self._lock:
            self._total = max(self._total, discovered)
        self._show()

    def total(self) -> int:
        return max(self._total, self._metrics().total_units)

    def percent(self) -> float:
        return self._metrics().best_progress

    def counts_text(self) -> str:
        metrics = self._metrics()
        return f"{self.completed()}/{self.total()} files, {metrics.best_label}, {metrics.reliability_label}"
