"""PDF inspection and page rendering."""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from ...constants import (
    AVERAGE_BYTES_PER_PAGE,
    BYTES_PER_PIXEL,
    COMPRESSION_RATIO,
    DEFAULT_DPI,
    MAX_AUTO_DPI,
    MAX_OVERRIDE_DPI,
    MIN_AUTO_DPI,
    MIN_OVERRIDE_DPI,
    POINTS_PER_INCH,
)
from ...exceptions import FileLoadError, RenderingError
from ...resources import fitz, open_pdf_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PdfInfo:
    """Cheap metadata of a PDF.

    Attributes:
        page_count: Number of pages parsed from the document structure
        file_size: Size of the file in bytes
        page_width: Width of the first page in points (0 if unknown)
        page_height: Height of the first page in points (0 if unknown)
    """

    page_count: int
    file_size: int
    page_width: float = 0.0
    page_height: float = 0.0

    @property
    def has_dimensions(self) -> bool:
        return self.page_width > 0 and self.page_height > 0

    @property
    def bytes_per_page(self) -> int:
        return self.file_size // self.page_count if self.page_count > 0 else 0


def get_pdf_info(pdf_path: Path) -> PdfInfo:
    """Read the page count and first-page geometry of a PDF.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        PdfInfo with the exact page count

    Raises:
        FileLoadError: If the document structure cannot be parsed
        DependencyError: If PyMuPDF is not installed

    Example:
        >>> info = get_pdf_info(Path("document.pdf"))
        >>> info.page_count
        10
    """
    file_size = pdf_path.stat().st_size
    with open_pdf_document(pdf_path) as doc:
        if doc.needs_pass:
            raise FileLoadError(f"PDF is encrypted: {pdf_path.name}")
        page_count = doc.page_count
        width = height = 0.0
        if page_count > 0:
            rect = doc.load_page(0).rect
            width, height = float(rect.width), float(rect.height)
    return PdfInfo(page_count=page_count, file_size=file_size, page_width=width, page_height=height)


def estimate_page_count(file_size: int) -> int:
    """Size heuristic used when a document's page count cannot be parsed.

    Example:
        >>> estimate_page_count(1_500_000)
        9
    """
    return max(1, file_size // AVERAGE_BYTES_PER_PAGE)


def calculate_target_dpi(info: PdfInfo) -> int:
    """Largest render resolution whose estimated encoded size fits the per-page budget.

    Solves ``area_sq_in * dpi^2 * BYTES_PER_PIXEL * COMPRESSION_RATIO <= budget``
    where the budget is the average stored bytes per page, then clamps the
    result to [MIN_AUTO_DPI, MAX_AUTO_DPI].
    """
    if not info.has_dimensions or info.bytes_per_page <= 0:
        return DEFAULT_DPI

    area = (info.page_width / POINTS_PER_INCH) * (info.page_height / POINTS_PER_INCH)
    dpi = int(math.sqrt(info.bytes_per_page / (area * BYTES_PER_PIXEL * COMPRESSION_RATIO)))
    return max(MIN_AUTO_DPI, min(MAX_AUTO_DPI, dpi))


def resolve_target_dpi(info: PdfInfo, override: int | None = None) -> int:
    """Return the user override clamped to the safety range, or the computed DPI."""
    if override is not None and override > 0:
        clamped = max(MIN_OVERRIDE_DPI, min(MAX_OVERRIDE_DPI, override))
        if clamped != override:
            logger.warning("DPI override %d clamped to %d", override, clamped)
        return clamped
    return calculate_target_dpi(info)


def pixmap_to_array(pixmap: Any) -> np.ndarray:
    """Convert an RGB PyMuPDF pixmap to an (H, W, 3) uint8 array."""
    array = np.frombuffer(pixmap.samples, dtype=np.uint8).reshape(pixmap.height, pixmap.width, pixmap.n)
    if pixmap.n == 4:  # noqa: PLR2004
        array = array[:, :, :3]
    return np.ascontiguousarray(array)


def render_pdf_page(doc: Any, page_index: int, dpi: int) -> np.ndarray:
    """Render one page of an open document.

    Args:
        doc: Open PyMuPDF document
        page_index: 0-based page index
        dpi: Target resolution

    Returns:
        RGB bitmap

    Raises:
        RenderingError: If the page cannot be rendered
    """
    try:
        page = doc.load_page(page_index)
        pixmap = page.get_pixmap(dpi=dpi, colorspace=fitz.csRGB, alpha=False)
    except Exception as e:
        raise RenderingError(f"Failed to render page {page_index + 1}: {e}") from e
    return pixmap_to_array(pixmap)


class PdfPageRenderer:
    """Page renderer over one open document, shared by all workers.

    PyMuPDF documents are not safe for concurrent use, so every render holds
    the renderer lock.

    Example:
        >>> with open_page_renderer(Path("doc.pdf")) as renderer:
        ...     bitmap = renderer.render(0, dpi=100)
    """

    def __init__(self, doc: Any):
        self._doc = doc
        self._lock = threading.Lock()

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def render(self, page_index: int, dpi: int) -> np.ndarray:
        with self._lock:
            return render_pdf_page(self._doc, page_index, dpi)


@contextmanager
def open_page_renderer(pdf_path: Path) -> Iterator[PdfPageRenderer]:
    """Open a PDF and yield a lock-guarded renderer over it."""
    with open_pdf_document(pdf_path) as doc:
        yield PdfPageRenderer(doc)
