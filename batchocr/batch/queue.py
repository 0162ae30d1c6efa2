"""Unbounded work queue with live aggregate counters.

The discovery thread enqueues units while the main thread consumes them.
Totals grow as discovery proceeds and freeze once discovery is marked
complete; completed counters only ever grow and never pass the totals.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque

from ..exceptions import QueueClosedError
from ..types import Unit
from .types import ProgressMetrics

logger = logging.getLogger(__name__)


class MonotonicCounter:
    """Lock-guarded integer that can only grow.

    Reads are unsynchronised snapshots; no consistency across counters is implied.
    """

    __slots__ = ("_value", "_lock")

    def __init__(self, value: int = 0):
        self._value = value
        self._lock = threading.Lock()

    def add(self, amount: int = 1) -> int:
        if amount < 0:
            raise ValueError(f"Counter cannot decrease (got {amount})")
        with self._lock:
            self._value += amount
            return self._value

    @property
    def value(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __repr__(self) -> str:
        return f"MonotonicCounter({self._value})"


class WorkQueue:
    """FIFO of discovered units plus aggregate scope counters.

    Example:
        >>> queue = WorkQueue()
        >>> queue.enqueue(unit)
        >>> queue.mark_discovery_complete()
        >>> while queue.has_more():
        ...     unit = queue.dequeue()
        ...     if unit is None:
        ...         break
        ...     process(unit)
        ...     queue.mark_unit_completed(unit)
    """

    def __init__(self) -> None:
        self._items: deque[Unit] = deque()
        self._cond = threading.Condition()
        self._discovery_complete = threading.Event()

        self._total_units = MonotonicCounter()
        self._total_pages = MonotonicCounter()
        self._total_bytes = MonotonicCounter()
        self._exact_pages = MonotonicCounter()
        self._estimated_pages = MonotonicCounter()

        self._completed_units = MonotonicCounter()
        self._completed_pages = MonotonicCounter()
        self._completed_bytes = MonotonicCounter()

    # ==================== Producer side ====================

    def enqueue(self, unit: Unit) -> None:
        """Append a unit and count it. Never blocks on consumers.

        The unit becomes retrievable before it is counted, so a reader never
        sees a unit in the totals that ``dequeue`` could not return.

        Raises:
            QueueClosedError: If discovery was already marked complete
        """
        with self._cond:
            if self._discovery_complete.is_set():
                raise QueueClosedError(f"Cannot enqueue {unit.name}: discovery is complete")
            self._items.append(unit)
            self._total_units.add()
            self._total_pages.add(unit.estimated_pages)
            self._total_bytes.add(unit.size_bytes)
            if unit.page_count_exact:
                self._exact_pages.add(unit.estimated_pages)
            else:
                self._estimated_pages.add(unit.estimated_pages)
            self._cond.notify()

    def mark_discovery_complete(self) -> None:
        """Latch discovery as complete. Idempotent and irreversible."""
        with self._cond:
            if self._discovery_complete.is_set():
                return
            self._discovery_complete.set()
            self._cond.notify_all()
        logger.debug("Discovery complete: %d units, %d pages", self.total_units, self.total_pages)

    # ==================== Consumer side ====================

    def dequeue(self, timeout: float | None = None) -> Unit | None:
        """Take the next unit, blocking until one is available.

        Returns None when discovery is complete and the queue is drained, or
        when ``timeout`` expires first. A KeyboardInterrupt raised while
        waiting propagates to the caller.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            while not self._items:
                if self._discovery_complete.is_set():
                    return None
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return None
                # Bounded waits keep the main thread responsive to signals
                self._cond.wait(0.5 if remaining is None else min(0.5, remaining))
            return self._items.popleft()

    def has_more(self) -> bool:
        """True while units are queued or discovery may still produce more."""
        return bool(self._items) or not self._discovery_complete.is_set()

    def wait_for_work(self, timeout: float, poll_interval: float = 0.1) -> bool:
        """Wait until a unit is queued or discovery completes, bounded by ``timeout``.

        Returns:
            True if at least one unit has been discovered
        """
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self._items or self._discovery_complete.is_set():
                break
            time.sleep(poll_interval)
        else:
            logger.warning("No work discovered within %.0fs", timeout)
        return self.total_units > 0

    def mark_unit_completed(self, unit: Unit) -> None:
        """Credit a finished (or failed, or skipped) unit to the completed counters.

        Pages are credited with the discovery estimate so completed pages can
        never exceed total pages.
        """
        self._completed_units.add()
        self._completed_pages.add(unit.estimated_pages)
        self._completed_bytes.add(unit.size_bytes)

    # ==================== Aggregates ====================

    @property
    def discovery_complete(self) -> bool:
        return self._discovery_complete.is_set()

    @property
    def size(self) -> int:
        return len(self._items)

    @property
    def total_units(self) -> int:
        return self._total_units.value

    @property
    def total_pages(self) -> int:
        return self._total_pages.value

    @property
    def total_bytes(self) -> int:
        return self._total_bytes.value

    @property
    def completed_units(self) -> int:
        return self._completed_units.value

    @property
    def completed_pages(self) -> int:
        return self._completed_pages.value

    @property
    def completed_bytes(self) -> int:
        return self._completed_bytes.value

    @property
    def reliability(self) -> float:
        """Share of total pages that came from exact page counts."""
        exact = self._exact_pages.value
        estimated = self._estimated_pages.value
        if exact + estimated == 0:
            return 0.0
        return exact / (exact + estimated)

    def metrics(self) -> ProgressMetrics:
        """Approximate snapshot of all counters for progress display."""
        return ProgressMetrics(
            total_units=self.total_units,
            completed_units=self.completed_units,
            total_pages=self.total_pages,
            completed_pages=self.completed_pages,
            total_bytes=self.total_bytes,
            completed_bytes=self.completed_bytes,
            reliability=self.reliability,
        )

    def __repr__(self) -> str:
        return (
            f"WorkQueue(queued={self.size}, units={self.completed_units}/{self.total_units}, "
            f"pages={self.completed_pages}/{self.total_pages}, complete={self.discovery_complete})"
        )
