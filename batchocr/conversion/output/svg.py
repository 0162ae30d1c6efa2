"""SVG overlay of recognised line and word boxes on top of the source image."""

from __future__ import annotations

from xml.sax.saxutils import escape, quoteattr

from ...constants import HIGH_CONFIDENCE, MEDIUM_CONFIDENCE
from ...types import BoundingQuad, OcrResult, PageImage

_STYLE = """
.line-box { fill: none; stroke: #000000; stroke-width: 0.8; stroke-dasharray: 4,2; }
.word-box-high { fill: none; stroke: #00aa00; stroke-width: 0.6; }
.word-box-med { fill: none; stroke: #ffaa00; stroke-width: 0.6; }
.word-box-low { fill: none; stroke: #ff0000; stroke-width: 0.6; }
.word-text { font-family: Arial, sans-serif; font-size: 12px; fill: #0066cc; }
"""


def _confidence_class(confidence: float) -> str:
    if confidence >= HIGH_CONFIDENCE:
        return "word-box-high"
    if confidence >= MEDIUM_CONFIDENCE:
        return "word-box-med"
    return "word-box-low"


def _polygon(quad: BoundingQuad, css_class: str, element_id: str, title: str | None = None) -> str:
    points = " ".join(f"{x:.1f},{y:.1f}" for x, y in quad.points())
    tooltip = f"<title>{escape(title)}</title>" if title else ""
    return f'<polygon id="{element_id}" class="{css_class}" points="{points}">{tooltip}</polygon>'


def render_svg_overlay(result: OcrResult, image: PageImage, show_text: bool = False) -> str:
    """Render boxes as layers over an ``<image>`` referencing the source by file name.

    Word boxes are coloured by confidence band (high, medium, low).
    """
    w, h = image.width, image.height
    out = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink" '
        f'width="{w}" height="{h}" viewBox="0 0 {w} {h}">',
        f"<defs><style><![CDATA[{_STYLE}]]></style></defs>",
        '<g id="background-image">',
        f'<image x="0" y="0" width="{w}" height="{h}" href={quoteattr(image.source_name)} preserveAspectRatio="none"/>',
        "</g>",
        '<g id="line-boxes">',
    ]
    for i, line in enumerate(result.lines):
        if line.bbox is not None:
            out.append(_polygon(line.bbox, "line-box", f"line-{i}"))
    out.append("</g>")

    out.append('<g id="word-boxes">')
    texts = []
    for i, line in enumerate(result.lines):
        for j, word in enumerate(line.words):
            if word.bbox is None:
                continue
            title = f"{word.text} ({word.confidence:.2f})"
            out.append(_polygon(word.bbox, _confidence_class(word.confidence), f"word-{i}-{j}", title))
            if show_text:
                texts.append(
                    f'<text class="word-text" x="{word.bbox.x1:.1f}" y="{word.bbox.y1 - 2:.1f}">{escape(word.text)}</text>'
                )
    out.append("</g>")

    if texts:
        out.append('<g id="word-text">')
        out.extend(texts)
        out.append("</g>")
    out.append("</svg>")
    return "\n".join(out) + "\n"
