"""Tests for category-tagged, progress-aware console logging."""

from __future__ import annotations

import io
import logging

import pytest

from batchocr.progress.coordinator import ProgressCoordinator
from batchocr.progress.logging import CategoryFormatter, ProgressAwareHandler, StepLogger, setup_console_logging
from batchocr.progress.tracker import ProgressTracker


@pytest.fixture
def captured():
    """Logger wired to a ProgressAwareHandler writing into a StringIO."""
    stream = io.StringIO()
    coordinator = ProgressCoordinator(stream)
    handler = ProgressAwareHandler(coordinator)
    handler.setFormatter(CategoryFormatter())
    logger = logging.getLogger("batchocr.tests.logging")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(handler)
    yield logger, stream
    logger.removeHandler(handler)


class TestCategoryFormatter:
    """Tests for CategoryFormatter and StepLogger."""

    def test_step_has_marker_and_category(self, captured):
        logger, stream = captured
        StepLogger(logger, "PDF").step("Rendering page %d", 3)
        assert stream.getvalue() == "▶️ [PDF] Rendering page 3\n"

    def test_success_marker(self, captured):
        logger, stream = captured
        StepLogger(logger, "FOLDER").success("done")
        assert stream.getvalue().startswith("✅ [FOLDER] done")

    def test_error_level_marker_without_category(self, captured):
        logger, stream = captured
        logger.error("boom")
        assert stream.getvalue() == "❌ boom\n"

    def test_complete_is_logged_at_warning(self, captured):
        logger, stream = captured
        StepLogger(logger, "FOLDER").complete("Processing complete")
        assert stream.getvalue().startswith("🏁 [FOLDER] Processing complete")

    def test_timestamps_prefix(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", None, None)
        text = CategoryFormatter(timestamps=True).format(record)
        assert text.startswith("[")
        assert text.endswith("hello")
        assert text[3] == ":" and text[9] == "."


class TestSetupConsoleLogging:
    """Tests for setup_console_logging."""

    def test_level_depends_on_verbose(self):
        coordinator = ProgressCoordinator(io.StringIO())
        root = logging.getLogger()

        quiet = setup_console_logging(coordinator, verbose=False)
        loud = setup_console_logging(coordinator, verbose=True)
        try:
            assert quiet.level == logging.WARNING
            assert loud.level == logging.DEBUG
        finally:
            root.removeHandler(quiet)
            root.removeHandler(loud)


class TestProgressAwareHandler:
    """Tests for printing records alongside live bars."""

    def test_record_printed_while_bars_are_live(self, captured):
        logger, stream = captured
        handler = logger.handlers[-1]
        tracker = ProgressTracker("job", 2, coordinator=handler.coordinator, visible=True).start()
        try:
            logger.warning("scan.png: unreadable")
        finally:
            tracker.done()

        assert "⚠️ scan.png: unreadable\n" in stream.getvalue()

    def test_long_lines_are_not_wrapped(self, captured):
        logger, stream = captured
        message = "x" * 300
        logger.error(message)
        assert stream.getvalue() == f"❌ {message}\n"
