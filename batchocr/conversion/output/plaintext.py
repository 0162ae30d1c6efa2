"""Plain-text renderings of recognition results."""

from __future__ import annotations

from collections.abc import Iterable

from ...constants import PAGE_TEXT_DELIMITER
from ...types import OcrResult


def join_page_texts(texts: Iterable[str]) -> str:
    """Concatenate page texts in the given (ascending page) order."""
    return PAGE_TEXT_DELIMITER.join(texts)


def structured_text(result: OcrResult, show_confidence: bool = False, show_bounds: bool = False) -> str:
    """Human-readable dump of a result, printed when no output file is selected.

    Example:
        >>> print(structured_text(result, show_confidence=True))
        === OCR Results ===
        Lines: 1
        Words: 2

        Line 1: "Hello world"
          Words: "Hello"(0.98) "world"(0.91)
    """
    out = ["=== OCR Results ===", f"Lines: {result.line_count}", f"Words: {result.word_count}"]
    if result.text_angle != 0:
        out.append(f"Text angle: {result.text_angle:.1f} degrees")
    out.append("")

    for i, line in enumerate(result.lines, start=1):
        out.append(f'Line {i}: "{line.text}"')
        if show_confidence and line.words:
            words = " ".join(f'"{w.text}"({w.confidence:.2f})' for w in line.words)
            out.append(f"  Words: {words}")
        if show_bounds and line.bbox is not None:
            xs = [x for x, _ in line.bbox.points()]
            ys = [y for _, y in line.bbox.points()]
            out.append(f"  Bounds: ({min(xs):.0f},{min(ys):.0f})-({max(xs):.0f},{max(ys):.0f})")
        out.append("")

    return "\n".join(out) + "\n"
