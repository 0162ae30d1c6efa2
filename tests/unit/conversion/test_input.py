"""Tests for image loading and PDF inspection."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from batchocr.conversion.input import (
    PdfInfo,
    calculate_target_dpi,
    estimate_page_count,
    get_pdf_info,
    open_page_renderer,
    resolve_target_dpi,
)
from batchocr.exceptions import FileLoadError

LETTER = {"page_width": 612.0, "page_height": 792.0}


class TestLoadImage:
    """Tests for load_image."""

    @pytest.fixture
    def load_image(self):
        pytest.importorskip("cv2")
        from batchocr.conversion.input import load_image

        return load_image

    def test_loads_png_as_rgb(self, load_image, tmp_path: Path):
        path = tmp_path / "red.png"
        Image.new("RGB", (8, 6), (255, 0, 0)).save(path)

        bitmap = load_image(path)

        assert bitmap.shape == (6, 8, 3)
        assert bitmap.dtype == np.uint8
        assert tuple(bitmap[0, 0]) == (255, 0, 0)

    def test_grayscale_becomes_rgb(self, load_image, tmp_path: Path):
        path = tmp_path / "gray.png"
        Image.new("L", (5, 5), 128).save(path)
        assert load_image(path).shape == (5, 5, 3)

    def test_loads_gif(self, load_image, tmp_path: Path):
        path = tmp_path / "anim.gif"
        Image.new("RGB", (4, 4), (0, 0, 255)).save(path)
        assert load_image(path).shape == (4, 4, 3)

    def test_garbage_raises(self, load_image, tmp_path: Path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")
        with pytest.raises(FileLoadError):
            load_image(path)


class TestDpi:
    """Tests for render resolution selection."""

    def test_small_budget_clamps_to_minimum(self):
        info = PdfInfo(page_count=10, file_size=1_500_000, **LETTER)
        assert calculate_target_dpi(info) == 75

    def test_large_budget_clamps_to_maximum(self):
        info = PdfInfo(page_count=1, file_size=10_000_000, **LETTER)
        assert calculate_target_dpi(info) == 100

    def test_budget_inside_range(self):
        info = PdfInfo(page_count=1, file_size=1_000_000, **LETTER)
        assert calculate_target_dpi(info) == 84

    def test_missing_geometry_uses_default(self):
        assert calculate_target_dpi(PdfInfo(page_count=3, file_size=900_000)) == 100

    @pytest.mark.parametrize(("override", "expected"), [(150, 150), (50, 100), (600, 300)])
    def test_override_is_clamped(self, override, expected):
        info = PdfInfo(page_count=10, file_size=1_500_000, **LETTER)
        assert resolve_target_dpi(info, override) == expected

    def test_no_override_computes(self):
        info = PdfInfo(page_count=10, file_size=1_500_000, **LETTER)
        assert resolve_target_dpi(info, None) == 75

    def test_estimate_page_count(self):
        assert estimate_page_count(1_500_000) == 9
        assert estimate_page_count(10) == 1


class TestPdfInspection:
    """Tests against real PDFs built with PyMuPDF."""

    def test_get_pdf_info(self, pdf_factory):
        path = pdf_factory("three.pdf", 3)

        info = get_pdf_info(path)

        assert info.page_count == 3
        assert info.file_size == path.stat().st_size
        assert info.page_width == pytest.approx(612.0)
        assert info.page_height == pytest.approx(792.0)

    def test_garbage_pdf_raises(self, tmp_path: Path):
        pytest.importorskip("fitz")
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf document" * 10)
        with pytest.raises(FileLoadError):
            get_pdf_info(path)

    def test_renderer_produces_rgb_bitmap(self, pdf_factory):
        path = pdf_factory("one.pdf", 1)

        with open_page_renderer(path) as renderer:
            bitmap = renderer.render(0, dpi=72)
            assert renderer.page_count == 1

        assert bitmap.shape == (792, 612, 3)
        assert bitmap.dtype == np.uint8
