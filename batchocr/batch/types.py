"""Batch processing data types."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..constants import RELIABILITY_THRESHOLD
from ..misc import format_bytes


def reliability_label(reliability: float) -> str:
    if reliability >= 0.9:  # noqa: PLR2004
        return "exact"
    if reliability >= RELIABILITY_THRESHOLD:
        return "mostly exact"
    if reliability >= 0.3:  # noqa: PLR2004
        return "mixed"
    return "estimated"


@dataclass(frozen=True)
class ProgressMetrics:
    """Snapshot of folder-level scope and completion.

    The best percentage comes from pages when page counts are mostly exact,
    from bytes when any size is known, and from unit counts otherwise.
    """

    total_units: int = 0
    completed_units: int = 0
    total_pages: int = 0
    completed_pages: int = 0
    total_bytes: int = 0
    completed_bytes: int = 0
    reliability: float = 0.0

    @property
    def uses_pages(self) -> bool:
        return self.reliability > RELIABILITY_THRESHOLD and self.total_pages > 0

    @property
    def uses_bytes(self) -> bool:
        return not self.uses_pages and self.total_bytes > 0

    @staticmethod
    def _percent(done: int, total: int) -> float:
        if total <= 0:
            return 0.0
        return min(100.0, done * 100.0 / total)

    @property
    def page_progress(self) -> float:
        return self._percent(self.completed_pages, self.total_pages)

    @property
    def byte_progress(self) -> float:
        return self._percent(self.completed_bytes, self.total_bytes)

    @property
    def unit_progress(self) -> float:
        return self._percent(self.completed_units, self.total_units)

    @property
    def best_progress(self) -> float:
        """Completion percentage from the most trustworthy metric."""
        if self.uses_pages:
            return self.page_progress
        if self.uses_bytes:
            return self.byte_progress
        return self.unit_progress

    @property
    def best_label(self) -> str:
        if self.uses_pages:
            return f"{self.completed_pages}/{self.total_pages} pages"
        if self.uses_bytes:
            return f"{format_bytes(self.completed_bytes)}/{format_bytes(self.total_bytes)}"
        return f"{self.completed_units}/{self.total_units} files"

    @property
    def reliability_label(self) -> str:
        return reliability_label(self.reliability)


@dataclass
class BatchSummary:
    """Counts reported at the end of a folder run.

    Attributes:
        success: Units processed or skipped without error
        errors: Units that failed
        skipped: Units whose artifacts were already complete (subset of success)
        failed_units: Names of failed units with their error message
    """

    success: int = 0
    errors: int = 0
    skipped: int = 0
    failed_units: list[tuple[str, str]] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.errors > 0 else 0

    def to_dict(self) -> dict[str, object]:
        return {
            "success": self.success,
            "errors": self.errors,
            "skipped": self.skipped,
            "failed_units": [{"name": n, "error": e} for n, e in self.failed_units],
        }
