"""Scoped access to PyMuPDF documents.

PyMuPDF is imported once here; callers go through ``open_pdf_document`` so a
missing install surfaces as ``DependencyError`` instead of an ImportError at
module import time.
"""

from __future__ import annotations

import gc
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from .exceptions import DependencyError, FileLoadError

logger = logging.getLogger(__name__)

# Optional PyMuPDF import
try:
    import fitz  # type: ignore[import-untyped]

    _HAS_PYMUPDF = True
except ImportError:
    fitz = None  # type: ignore[assignment]
    _HAS_PYMUPDF = False


@contextmanager
def open_pdf_document(pdf_path: str | Path) -> Iterator[Any]:
    """Open a PDF for the duration of the block.

    The document is closed and its memory collected on exit, also when the
    body raises. Unreadable or missing files are reported as ``FileLoadError``
    so callers can mark the unit failed without special-casing PyMuPDF errors.

    Raises:
        DependencyError: If PyMuPDF is not installed
        FileLoadError: If the file is missing or not a parseable PDF

    Example:
        >>> with open_pdf_document("scan.pdf") as doc:
        ...     doc.page_count
        12
    """
    if not _HAS_PYMUPDF or fitz is None:
        raise DependencyError("PyMuPDF (fitz) is not available. Install it with: pip install pymupdf")

    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileLoadError(f"PDF file not found: {pdf_path}")

    try:
        doc = fitz.open(str(pdf_path))
    except Exception as e:
        raise FileLoadError(f"Cannot open PDF {pdf_path.name}: {e}") from e

    try:
        logger.debug("Opened %s (%d pages)", pdf_path.name, doc.page_count)
        yield doc
    finally:
        doc.close()
        gc.collect()
