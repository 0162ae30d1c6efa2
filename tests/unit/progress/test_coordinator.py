"""Tests for coordinated multi-bar rendering."""

from __future__ import annotations

import io

import pytest
from rich.console import Console

from batchocr.progress.coordinator import ProgressCoordinator
from batchocr.progress.tracker import ProgressTracker


@pytest.fixture
def coordinator():
    coordinator = ProgressCoordinator(io.StringIO())
    yield coordinator
    coordinator.disable()


@pytest.fixture
def folder_mode(coordinator) -> ProgressCoordinator:
    coordinator.enable()
    return coordinator


def _tracker(label: str, coordinator: ProgressCoordinator, total: int = 4) -> ProgressTracker:
    return ProgressTracker(label, total, coordinator=coordinator, visible=True).start()


def _rendered_lines(coordinator: ProgressCoordinator) -> list[str]:
    buffer = io.StringIO()
    Console(file=buffer, width=120).print(coordinator.progress.get_renderable())
    return [line.rstrip() for line in buffer.getvalue().splitlines() if line.strip()]


class TestProgressCoordinator:
    """Tests for ProgressCoordinator."""

    def test_rows_render_in_label_order(self, folder_mode):
        _tracker("PDF z.pdf", folder_mode)
        _tracker("Folder", folder_mode)

        lines = _rendered_lines(folder_mode)

        assert len(lines) == 2
        assert lines[0].startswith("Folder")
        assert lines[1].startswith("PDF z.pdf")

    def test_row_shows_percentage_counts_and_eta(self, folder_mode):
        tracker = _tracker("job", folder_mode)
        tracker.increment()

        (line,) = _rendered_lines(folder_mode)

        assert "25%" in line
        assert "(1/4)" in line
        assert "ETA:" in line

    def test_finished_tracker_row_is_removed(self, folder_mode):
        finished = _tracker("Alpha", folder_mode, total=1)
        _tracker("Beta", folder_mode)
        finished.increment()
        finished.done()

        assert [t.label for t in folder_mode.trackers()] == ["Beta"]
        lines = _rendered_lines(folder_mode)
        assert len(lines) == 1
        assert lines[0].startswith("Beta")

    def test_folder_mode_keeps_display_between_trackers(self, folder_mode):
        _tracker("PDF a.pdf", folder_mode).done()

        assert folder_mode.progress is not None

    def test_display_follows_tracker_outside_folder_mode(self, coordinator):
        tracker = _tracker("PDF a.pdf", coordinator)
        assert coordinator.progress is not None

        tracker.done()

        assert coordinator.progress is None

    def test_disable_clears_registry(self, folder_mode):
        tracker = _tracker("A", folder_mode)
        folder_mode.disable()

        assert folder_mode.trackers() == []
        assert not folder_mode.is_registered(tracker)
        assert folder_mode.progress is None

    def test_invisible_tracker_registers_without_row(self, coordinator):
        tracker = ProgressTracker("quiet", 3, coordinator=coordinator, visible=False).start()

        assert coordinator.is_registered(tracker)
        assert coordinator.progress is None

    def test_brackets_in_labels_are_literal(self, folder_mode):
        _tracker("PDF scan[bold].pdf", folder_mode)

        (line,) = _rendered_lines(folder_mode)

        assert line.startswith("PDF scan[bold].pdf")

    def test_console_defaults_to_stream(self):
        stream = io.StringIO()
        coordinator = ProgressCoordinator(stream)

        coordinator.console.print("hello")

        assert stream.getvalue() == "hello\n"
