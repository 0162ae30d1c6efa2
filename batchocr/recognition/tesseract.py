"""Tesseract engine via pytesseract."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from PIL import Image

from ..exceptions import DependencyError
from ..types import BoundingQuad, OcrLine, OcrResult, OcrWord
from .base import RecognitionEngine

if TYPE_CHECKING:
    import numpy as np

logger = logging.getLogger(__name__)

try:
    import pytesseract
except ImportError:  # pragma: no cover - optional dependency guard
    pytesseract = None  # type: ignore[assignment]


class TesseractEngine(RecognitionEngine):
    """Recognition through the ``tesseract`` binary.

    Words are grouped into lines by Tesseract's (block, paragraph, line)
    numbering. Confidences are rescaled from 0..100 to 0..1. With
    ``detect_angle`` the page orientation from Tesseract's OSD pass becomes
    ``text_angle``; pages OSD cannot read (too little text, no osd data)
    report 0.

    Args:
        lang: Tesseract language code(s), e.g. "eng" or "eng+deu"
        psm: Page segmentation mode
        oem: OCR engine mode
        detect_angle: Run orientation detection for each page
    """

    name = "tesseract"

    def __init__(self, lang: str = "eng", psm: int = 3, oem: int = 3, detect_angle: bool = False):
        if pytesseract is None:
            raise DependencyError("pytesseract is not installed. Install it with: pip install batchocr[tesseract]")
        self.lang = lang
        self.config = f"--oem {oem} --psm {psm}"
        self.detect_angle = detect_angle

    def _recognize_impl(self, bitmap: np.ndarray, width: int, height: int, max_lines: int) -> OcrResult:
        image = Image.fromarray(bitmap)
        data = pytesseract.image_to_data(
            image,
            lang=self.lang,
            config=self.config,
            output_type=pytesseract.Output.DICT,
        )
        angle = self._orientation(image) if self.detect_angle else 0.0
        return OcrResult(lines=self._group_lines(data, max_lines), text_angle=angle)

    @staticmethod
    def _orientation(image: Image.Image) -> float:
        try:
            osd = pytesseract.image_to_osd(image, output_type=pytesseract.Output.DICT)
        except pytesseract.TesseractError as e:
            logger.debug("Orientation detection skipped: %s", e)
            return 0.0
        return float(osd.get("rotate", 0))

    @staticmethod
    def _group_lines(data: dict[str, list[Any]], max_lines: int) -> list[OcrLine]:
        grouped: dict[tuple[int, int, int], list[OcrWord]] = {}
        for i, text in enumerate(data.get("text", [])):
            text = str(text).strip()
            conf = float(data["conf"][i])
            if not text or conf < 0:
                continue
            key = (int(data["block_num"][i]), int(data["par_num"][i]), int(data["line_num"][i]))
            quad = BoundingQuad.from_xywh(
                float(data["left"][i]), float(data["top"][i]), float(data["width"][i]), float(data["height"][i])
            )
            grouped.setdefault(key, []).append(OcrWord(text=text, confidence=min(1.0, conf / 100.0), bbox=quad))

        lines: list[OcrLine] = []
        for words in grouped.values():
            if len(lines) >= max_lines:
                break
            lines.append(OcrLine(text=" ".join(w.text for w in words), words=words, bbox=_enclosing(words)))
        return lines


def _enclosing(words: list[OcrWord]) -> BoundingQuad | None:
    quads = [w.bbox for w in words if w.bbox is not None]
    if not quads:
        return None
    x0 = min(q.x1 for q in quads)
    y0 = min(q.y1 for q in quads)
    x1 = max(q.x3 for q in quads)
    y1 = max(q.y3 for q in quads)
    return BoundingQuad.from_xywh(x0, y0, x1 - x0, y1 - y0)
