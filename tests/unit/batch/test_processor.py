"""Tests for the folder batch processor."""

from __future__ import annotations

import io
import threading
import time
from pathlib import Path

import numpy as np
import pytest

from batchocr.batch.estimator import estimate_unit
from batchocr.batch.processor import FolderBatchProcessor
from batchocr.config import BatchConfig
from batchocr.exceptions import DiscoveryError
from batchocr.progress.coordinator import ProgressCoordinator


def _png(path: Path) -> Path:
    from PIL import Image

    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(np.zeros((12, 16, 3), dtype=np.uint8)).save(path)
    return path


@pytest.fixture
def make_processor(fake_engine_factory, renderer_factory):
    def build(**overrides) -> FolderBatchProcessor:
        config = BatchConfig(image_format="png", first_work_timeout=5.0, **overrides)
        processor = FolderBatchProcessor(config, fake_engine_factory, ProgressCoordinator(io.StringIO()))
        processor.document_processor.renderer_factory = renderer_factory
        return processor

    return build


@pytest.fixture
def mixed_folder(tmp_path: Path, pdf_factory) -> Path:
    for name in ("a.png", "b.png", "c.png"):
        _png(tmp_path / name)
    pdf_factory("doc.pdf", 5)
    return tmp_path


class TestFolderBatchProcessor:
    """Tests for FolderBatchProcessor.process."""

    def test_processes_images_and_documents(self, mixed_folder, make_processor):
        processor = make_processor()

        summary = processor.process(mixed_folder)

        assert summary.success == 4
        assert summary.errors == 0
        assert summary.exit_code == 0
        metrics = processor.queue.metrics()
        assert metrics.total_units == 4
        assert metrics.total_pages == 8
        assert metrics.reliability == 1.0
        assert metrics.completed_pages == 8
        for name in ("a.png", "b.png", "c.png"):
            assert (mixed_folder / f"{name}.oneocr.txt").exists()
        combined = mixed_folder / "doc.pdf.oneocr" / "doc.pdf.oneocr.txt"
        assert combined.read_text(encoding="utf-8") == "\n".join(f"page {n}" for n in range(1, 6))

    def test_second_run_skips_everything(self, mixed_folder, make_processor, engine_calls):
        make_processor().process(mixed_folder)
        engine_calls.clear()

        summary = make_processor().process(mixed_folder)

        assert summary.success == 4
        assert summary.skipped == 4
        assert engine_calls == []

    def test_failed_unit_is_counted_and_batch_continues(self, mixed_folder, make_processor):
        (mixed_folder / "broken.png").write_bytes(b"not an image")

        summary = make_processor().process(mixed_folder)

        assert summary.success == 4
        assert summary.errors == 1
        assert summary.exit_code == 1
        assert summary.failed_units[0][0] == "broken.png"

    def test_empty_folder_is_nothing_to_do(self, tmp_path, make_processor, engine_calls):
        summary = make_processor().process(tmp_path)

        assert summary.success == 0
        assert summary.errors == 0
        assert summary.exit_code == 0

    def test_missing_folder_raises(self, tmp_path, make_processor):
        with pytest.raises(DiscoveryError):
            make_processor().process(tmp_path / "missing")

    def test_mirrors_into_output_root(self, tmp_path, make_processor):
        source = tmp_path / "in"
        _png(source / "sub" / "x.png")
        out = tmp_path / "out"

        summary = make_processor(output_dir=out, recursive=True).process(source)

        assert summary.success == 1
        assert (out / "sub" / "x.png.oneocr.txt").read_text(encoding="utf-8") == "page 1"
        assert not (source / "sub" / "x.png.oneocr.txt").exists()

    def test_engine_not_started_when_all_units_done(self, tmp_path, make_processor, fake_engine_factory):
        _png(tmp_path / "a.png")
        make_processor().process(tmp_path)
        created = len(fake_engine_factory.created)

        make_processor().process(tmp_path)

        assert len(fake_engine_factory.created) == created

    def test_main_thread_handle_closed_after_run(self, tmp_path, make_processor, fake_engine_factory):
        _png(tmp_path / "a.png")

        make_processor().process(tmp_path)

        assert fake_engine_factory.created
        assert all(engine.closed for engine in fake_engine_factory.created)

    def test_relative_input_root(self, tmp_path, make_processor, monkeypatch):
        _png(tmp_path / "scans" / "a.png")
        monkeypatch.chdir(tmp_path)

        summary = make_processor().process(Path("scans"))

        assert summary.errors == 0
        assert summary.success == 1
        assert (tmp_path / "scans" / "a.png.oneocr.txt").read_text(encoding="utf-8") == "page 1"

    def test_relative_output_root(self, tmp_path, make_processor, monkeypatch):
        _png(tmp_path / "scans" / "a.png")
        monkeypatch.chdir(tmp_path)

        summary = make_processor(output_dir=Path("out")).process(tmp_path / "scans")

        assert summary.errors == 0
        assert (tmp_path / "out" / "a.png.oneocr.txt").exists()

    def test_slow_discovery_returns_within_shutdown_timeout(self, tmp_path, fake_engine_factory):
        _png(tmp_path / "a.png")
        release = threading.Event()

        def stalled_estimator(path):
            release.wait(10)
            return estimate_unit(path)

        config = BatchConfig(image_format="png", first_work_timeout=0.2, shutdown_timeout=0.2)
        processor = FolderBatchProcessor(
            config, fake_engine_factory, ProgressCoordinator(io.StringIO()), estimator=stalled_estimator
        )
        started = time.monotonic()
        try:
            summary = processor.process(tmp_path)
            elapsed = time.monotonic() - started
        finally:
            release.set()

        assert summary.success == 0
        assert elapsed < 2.0
