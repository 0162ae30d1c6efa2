"""Tests for unit and outcome types."""

from __future__ import annotations

from pathlib import Path

from batchocr.types import Unit, UnitKind, UnitOutcome, UnitStatus


class TestUnit:
    def test_str_marks_estimates(self):
        exact = Unit(Path("/in/a.pdf"), UnitKind.MULTI_PAGE, 2048, 3, True)
        estimated = Unit(Path("/in/b.pdf"), UnitKind.MULTI_PAGE, 1536, 9, False)

        assert str(exact) == "a.pdf (multi_page, 3 pages, 2.0 KB)"
        assert str(estimated) == "b.pdf (multi_page, ~9 pages, 1.5 KB)"
        assert exact.name == "a.pdf"


class TestUnitOutcome:
    def test_skipped_counts_as_success(self):
        outcome = UnitOutcome.skipped(4)
        assert outcome.status is UnitStatus.SKIPPED
        assert outcome.pages_skipped == 4
        assert outcome.succeeded

    def test_failed(self):
        outcome = UnitOutcome.failed("boom")
        assert not outcome.succeeded
        assert outcome.error == "boom"
