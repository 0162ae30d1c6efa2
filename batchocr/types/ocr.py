"""Recognition result types.

The engine reports lines of words. Each word carries its text, a confidence
in [0, 1] and an optional quadrilateral given as four corner points
(x1, y1, ..., x4, y4) in pixel coordinates, clockwise from the top-left.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from ..constants import HIGH_CONFIDENCE, MEDIUM_CONFIDENCE

QUAD_POINTS = 8


@dataclass(frozen=True)
class BoundingQuad:
    """Quadrilateral bounding region with float coordinates."""

    x1: float
    y1: float
    x2: float
    y2: float
    x3: float
    y3: float
    x4: float
    y4: float

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> BoundingQuad:
        """Create from a flat sequence of eight numbers.

        Raises:
            ValueError: If the sequence does not hold exactly eight values
        """
        if len(values) != QUAD_POINTS:
            raise ValueError(f"Bounding quad needs {QUAD_POINTS} values, got {len(values)}")
        return cls(*(float(v) for v in values))

    @classmethod
    def from_xywh(cls, x: float, y: float, w: float, h: float) -> BoundingQuad:
        """Create an axis-aligned quad from (x, y, width, height)."""
        return cls(x, y, x + w, y, x + w, y + h, x, y + h)

    def to_list(self) -> list[float]:
        return [self.x1, self.y1, self.x2, self.y2, self.x3, self.y3, self.x4, self.y4]

    def points(self) -> list[tuple[float, float]]:
        return [(self.x1, self.y1), (self.x2, self.y2), (self.x3, self.y3), (self.x4, self.y4)]


@dataclass
class OcrWord:
    """A recognised word."""

    text: str
    confidence: float
    bbox: BoundingQuad | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "confidence": self.confidence,
            "bbox": self.bbox.to_list() if self.bbox else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OcrWord:
        bbox = data.get("bbox")
        return cls(
            text=data["text"],
            confidence=float(data.get("confidence", 0.0)),
            bbox=BoundingQuad.from_sequence(bbox) if bbox else None,
        )


@dataclass
class OcrLine:
    """A recognised line (segment) of words."""

    text: str
    words: list[OcrWord] = field(default_factory=list)
    bbox: BoundingQuad | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "words": [word.to_dict() for word in self.words],
            "bbox": self.bbox.to_list() if self.bbox else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OcrLine:
        bbox = data.get("bbox")
        return cls(
            text=data.get("text", ""),
            words=[OcrWord.from_dict(w) for w in data.get("words", [])],
            bbox=BoundingQuad.from_sequence(bbox) if bbox else None,
        )


@dataclass
class OcrResult:
    """Result of recognising one bitmap.

    Attributes:
        lines: Recognised lines in reading order
        text_angle: Document-level skew angle in degrees
    """

    lines: list[OcrLine] = field(default_factory=list)
    text_angle: float = 0.0

    @classmethod
    def empty(cls) -> OcrResult:
        """Result recorded for a page whose recognition failed."""
        return cls(lines=[], text_angle=0.0)

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def word_count(self) -> int:
        return sum(len(line.words) for line in self.lines)

    def iter_words(self):
        for line in self.lines:
            yield from line.words

    def filter_by_confidence(self, min_confidence: float) -> OcrResult:
        """Drop words below ``min_confidence`` and lines left without words.

        Line text is rebuilt from the surviving words joined by spaces.
        A threshold of zero or less returns the result unchanged.
        """
        if min_confidence <= 0:
            return self

        lines: list[OcrLine] = []
        for line in self.lines:
            words = [w for w in line.words if w.confidence >= min_confidence]
            if not words:
                continue
            lines.append(OcrLine(text=" ".join(w.text for w in words), words=words, bbox=line.bbox))
        return OcrResult(lines=lines, text_angle=self.text_angle)

    def to_dict(self) -> dict[str, Any]:
        return {
            "text_angle": self.text_angle,
            "lines": [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OcrResult:
        return cls(
            lines=[OcrLine.from_dict(line) for line in data.get("lines", [])],
            text_angle=float(data.get("text_angle", 0.0)),
        )


@dataclass(frozen=True)
class OcrMetrics:
    """Confidence statistics of a result, written into the markup artifacts."""

    line_count: int
    word_count: int
    average_confidence: float
    high_ratio: float
    medium_ratio: float
    low_ratio: float

    @classmethod
    def from_result(cls, result: OcrResult) -> OcrMetrics:
        confidences = [word.confidence for word in result.iter_words()]
        count = len(confidences)
        if count == 0:
            return cls(result.line_count, 0, 0.0, 0.0, 0.0, 0.0)

        high = sum(1 for c in confidences if c >= HIGH_CONFIDENCE)
        medium = sum(1 for c in confidences if MEDIUM_CONFIDENCE <= c < HIGH_CONFIDENCE)
        low = count - high - medium
        return cls(
            line_count=result.line_count,
            word_count=count,
            average_confidence=sum(confidences) / count,
            high_ratio=high / count,
            medium_ratio=medium / count,
            low_ratio=low / count,
        )
