"""Pytest configuration and shared fixtures for batchocr tests.

This module provides:
- Sample bitmaps and recognition results
- A deterministic fake engine and a fake page renderer
- Real PDFs built with PyMuPDF (skipped when it is not installed)
"""

from __future__ import annotations

import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import numpy as np
import pytest

# Ensure project root is importable when running tests via python -m pytest
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from batchocr.exceptions import RecognitionError  # noqa: E402
from batchocr.recognition.base import RecognitionEngine  # noqa: E402
from batchocr.types import BoundingQuad, OcrLine, OcrResult, OcrWord  # noqa: E402


class FakeEngine(RecognitionEngine):
    """Engine that reads the page number back from the bitmap.

    FakeRenderer fills page ``n`` (0-based index) with the value ``n``, so
    recognising it yields the line ``page <n + 1>``. Every call is recorded.
    """

    name = "fake"

    def __init__(self, calls: list[int] | None = None, fail_pages: set[int] | None = None):
        self.calls = calls if calls is not None else []
        self.fail_pages = fail_pages or set()
        self.threads: set[str] = set()
        self.closed = False

    def _recognize_impl(self, bitmap, width, height, max_lines):
        page_num = int(bitmap[0, 0, 0]) + 1
        self.calls.append(page_num)
        self.threads.add(threading.current_thread().name)
        if page_num in self.fail_pages:
            raise RecognitionError(f"engine crashed on page {page_num}")
        words = [
            OcrWord("page", 0.95, BoundingQuad.from_xywh(1, 1, 8, 4)),
            OcrWord(str(page_num), 0.65, BoundingQuad.from_xywh(10, 1, 4, 4)),
        ]
        line = OcrLine(text=f"page {page_num}", words=words, bbox=BoundingQuad.from_xywh(1, 1, 13, 4))
        return OcrResult(lines=[line][:max_lines], text_angle=0.0)

    def close(self):
        self.closed = True


class FakeRenderer:
    """Page renderer returning small solid bitmaps that encode the page index."""

    def __init__(self, fail_pages: set[int] | None = None):
        self.rendered: list[int] = []
        self.dpis: set[int] = set()
        self.fail_pages = fail_pages or set()
        self._lock = threading.Lock()

    def render(self, page_index: int, dpi: int) -> np.ndarray:
        from batchocr.exceptions import RenderingError

        with self._lock:
            self.rendered.append(page_index + 1)
            self.dpis.add(dpi)
        if page_index + 1 in self.fail_pages:
            raise RenderingError(f"Failed to render page {page_index + 1}")
        return np.full((12, 16, 3), page_index, dtype=np.uint8)


# ==================== Sample Data Fixtures ====================


@pytest.fixture
def sample_bitmap() -> np.ndarray:
    """Create a small white RGB bitmap (40x60)."""
    return np.full((40, 60, 3), 255, dtype=np.uint8)


@pytest.fixture
def sample_result() -> OcrResult:
    """Create a two-line recognition result with mixed confidences."""
    return OcrResult(
        lines=[
            OcrLine(
                text="Hello world",
                words=[
                    OcrWord("Hello", 0.98, BoundingQuad.from_xywh(0, 0, 20, 10)),
                    OcrWord("world", 0.62, BoundingQuad.from_xywh(25, 0, 20, 10)),
                ],
                bbox=BoundingQuad.from_xywh(0, 0, 45, 10),
            ),
            OcrLine(
                text="faint",
                words=[OcrWord("faint", 0.30, BoundingQuad.from_xywh(0, 15, 20, 10))],
                bbox=BoundingQuad.from_xywh(0, 15, 20, 10),
            ),
        ],
        text_angle=0.0,
    )


# ==================== Engine / Renderer Fixtures ====================


@pytest.fixture
def engine_calls() -> list[int]:
    """Shared list of page numbers the fake engines were called for."""
    return []


@pytest.fixture
def fake_engine_factory(engine_calls):
    """Factory building a new FakeEngine per call, all sharing ``engine_calls``."""
    created: list[FakeEngine] = []

    def factory() -> FakeEngine:
        engine = FakeEngine(engine_calls)
        created.append(engine)
        return engine

    factory.created = created  # type: ignore[attr-defined]
    return factory


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def renderer_factory(fake_renderer):
    """Context-manager factory yielding the shared fake renderer for any path."""

    @contextmanager
    def open_renderer(pdf_path: Path) -> Iterator[FakeRenderer]:
        yield fake_renderer

    return open_renderer


# ==================== PDF Fixtures ====================


def make_pdf(path: Path, pages: int) -> Path:
    """Write a PDF with ``pages`` text pages using PyMuPDF."""
    fitz = pytest.importorskip("fitz")
    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 72), f"Page {i + 1}")
    doc.save(str(path))
    doc.close()
    return path


@pytest.fixture
def pdf_factory(tmp_path: Path):
    """Build real PDFs under tmp_path: ``pdf_factory("a.pdf", 5)``."""

    def build(name: str, pages: int) -> Path:
        return make_pdf(tmp_path / name, pages)

    return build


@pytest.fixture
def fake_engine_cls() -> type[FakeEngine]:
    return FakeEngine


@pytest.fixture
def fake_renderer_cls() -> type[FakeRenderer]:
    return FakeRenderer
