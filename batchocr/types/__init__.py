"""Type definitions for the batch OCR pipeline.

This module provides:
- Unit, UnitKind: Discovered work items
- UnitOutcome, UnitStatus: Per-unit processing results
- BoundingQuad, OcrWord, OcrLine, OcrResult, OcrMetrics: Recognition results
- PageImage, PageResult: Per-page processing results
"""

from .ocr import BoundingQuad, OcrLine, OcrMetrics, OcrResult, OcrWord
from .page import PageImage, PageResult
from .unit import Unit, UnitKind, UnitOutcome, UnitStatus

__all__ = [
    # Units
    "Unit",
    "UnitKind",
    "UnitOutcome",
    "UnitStatus",
    # Recognition results
    "BoundingQuad",
    "OcrWord",
    "OcrLine",
    "OcrResult",
    "OcrMetrics",
    # Pages
    "PageImage",
    "PageResult",
]
