"""Compact JSON serialization of recognition results.

Lines are encoded positionally to keep files small::

    {"meta": {...}, "angle": 0, "lines": [[line_bounds, [["#0", "Hello", 0.98, "", word_bounds], ...]], ...]}

The empty fourth word slot is reserved for a corrected spelling.
"""

from __future__ import annotations

import json
from typing import Any

from ...misc import tz_now
from ...types import BoundingQuad, OcrMetrics, OcrResult, PageImage


def _bounds(quad: BoundingQuad | None) -> list[float | int] | None:
    if quad is None:
        return None
    return [int(v) if float(v).is_integer() else round(v, 1) for v in quad.to_list()]


def result_to_compact_dict(result: OcrResult, image: PageImage, timestamp: str | None = None) -> dict[str, Any]:
    metrics = OcrMetrics.from_result(result)
    lines: list[Any] = []
    index = 0
    for line in result.lines:
        words = []
        for word in line.words:
            words.append([f"#{index}", word.text, round(word.confidence, 3), "", _bounds(word.bbox)])
            index += 1
        lines.append([_bounds(line.bbox), words])

    return {
        "meta": {
            "file": image.source_name,
            "imgSize": f"{image.width}x{image.height}",
            "timestampUTCISO": timestamp or tz_now().isoformat(),
            "metrics": {
                "linesCount": metrics.line_count,
                "wordsCount": metrics.word_count,
                "averageOcrConfidence": round(metrics.average_confidence, 3),
                "highConfWordsRatio": round(metrics.high_ratio, 3),
                "mediumConfWordsRatio": round(metrics.medium_ratio, 3),
                "lowConfWordsRatio": round(metrics.low_ratio, 3),
            },
        },
        "angle": round(result.text_angle, 1),
        "lines": lines,
    }


def result_to_compact_json(result: OcrResult, image: PageImage, timestamp: str | None = None) -> str:
    """Single-line JSON rendering of a result."""
    return json.dumps(result_to_compact_dict(result, image, timestamp), ensure_ascii=False, separators=(",", ":"))
