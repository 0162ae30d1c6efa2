"""Unit classification and page-count estimation."""

from __future__ import annotations

import logging
from pathlib import Path

from ..constants import IMAGE_EXTENSIONS, MULTIPAGE_EXTENSIONS
from ..conversion.input.pdf import estimate_page_count, get_pdf_info
from ..types import Unit, UnitKind

logger = logging.getLogger(__name__)


def classify(path: Path) -> UnitKind:
    """Classify a file by extension (case-insensitive)."""
    suffix = path.suffix.lower()
    if suffix in IMAGE_EXTENSIONS:
        return UnitKind.IMAGE
    if suffix in MULTIPAGE_EXTENSIONS:
        return UnitKind.MULTI_PAGE
    return UnitKind.UNSUPPORTED


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError as e:
        logger.warning("Cannot stat %s: %s", path, e)
        return 0


def estimate_unit(path: Path) -> Unit:
    """Build the immutable Unit for a path.

    Images always count as one exact page. Documents use the parsed page
    count when the structure is readable; truncated or partially downloaded
    files fall back to the size heuristic and are flagged as estimated.
    Estimation never raises.
    """
    path = path.absolute()
    kind = classify(path)
    size = _file_size(path)

    if kind is UnitKind.IMAGE:
        return Unit(path=path, kind=kind, size_bytes=size, estimated_pages=1, page_count_exact=True)

    if kind is UnitKind.MULTI_PAGE:
        try:
            page_count = get_pdf_info(path).page_count
        except Exception as e:  # noqa: BLE001 - any parse failure falls back to the heuristic
            logger.debug("Page count of %s unreadable: %s", path.name, e)
            page_count = 0
        if page_count <= 0:
            pages = estimate_page_count(size)
            logger.debug("Estimating %d pages for %s from its size", pages, path.name)
            return Unit(path=path, kind=kind, size_bytes=size, estimated_pages=pages, page_count_exact=False)
        return Unit(path=path, kind=kind, size_bytes=size, estimated_pages=page_count, page_count_exact=True)

    return Unit(path=path, kind=kind, size_bytes=size, estimated_pages=0, page_count_exact=False)
