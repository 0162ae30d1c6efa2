"""Unit types: one discoverable file and the outcome of processing it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..misc import format_bytes


class UnitKind(str, Enum):
    """Classification of a discovered file."""

    IMAGE = "image"
    MULTI_PAGE = "multi_page"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Unit:
    """A discoverable piece of work.

    Created once by the unit estimator and never mutated afterwards.

    Attributes:
        path: Absolute path of the file
        kind: Image, multi-page document or unsupported
        size_bytes: File size at discovery time
        estimated_pages: Parsed page count, or the size heuristic when unparseable
        page_count_exact: Whether ``estimated_pages`` came from the document structure
    """

    path: Path
    kind: UnitKind
    size_bytes: int
    estimated_pages: int
    page_count_exact: bool

    @property
    def name(self) -> str:
        return self.path.name

    def __str__(self) -> str:
        marker = "" if self.page_count_exact else "~"
        return f"{self.name} ({self.kind.value}, {marker}{self.estimated_pages} pages, {format_bytes(self.size_bytes)})"


class UnitStatus(str, Enum):
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class UnitOutcome:
    """Result of processing one unit.

    Attributes:
        status: Completed, skipped (already checkpointed) or failed
        pages_processed: Pages recognised during this run
        pages_skipped: Pages whose artifacts already validated
        page_errors: Pages whose recognition failed and were recorded empty
        error: Failure message for a failed unit
    """

    status: UnitStatus
    pages_processed: int = 0
    pages_skipped: int = 0
    page_errors: int = 0
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is not UnitStatus.FAILED

    @classmethod
    def skipped(cls, pages: int = 0) -> UnitOutcome:
        return cls(status=UnitStatus.SKIPPED, pages_skipped=pages)

    @classmethod
    def failed(cls, error: str) -> UnitOutcome:
        return cls(status=UnitStatus.FAILED, error=error)
