"""Semantic XHTML artifacts.

A page is rendered as a ``<section>`` holding one ``<segment>`` per recognised
line and one ``<w>`` per word::

    <section class="ocrPage" data-page-num="2" data-words-count="2" ...>
    <div class="ocrContent">
    <segment num="1" b="10 10 90 10 90 30 10 30">
    <w i="#0" p="0.98" b="...">Hello</w> <w i="#1" p="0.9" b="...">world</w>
    </segment>
    </div>
    </section>

Attributes: ``b`` bounding quad, ``p`` confidence, ``i`` page-local word
index, ``num`` segment number.

Combined documents embed the per-page sections verbatim, so a merge built
from live results and one rebuilt from files on disk are byte-identical.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from xml.sax.saxutils import escape, quoteattr

from ...exceptions import FileFormatError
from ...types import BoundingQuad, OcrMetrics, OcrResult, PageImage

XHTML_NS = "http://www.w3.org/1999/xhtml"
FORMAT_NAME = "Semantic OCR XHTML"

_SECTION_RE = re.compile(r"<section\b.*?</section>", re.DOTALL)
_ATTR_RE = r'\b{name}="([^"]*)"'


def format_confidence(value: float) -> str:
    """Three decimals with trailing zeros stripped.

    Example:
        >>> format_confidence(0.9)
        '0.9'
        >>> format_confidence(1.0)
        '1'
    """
    return f"{value:.3f}".rstrip("0").rstrip(".")


def format_number(value: float) -> str:
    """Whole numbers as integers, everything else with one decimal."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def format_bounds(quad: BoundingQuad) -> str:
    return " ".join(format_number(v) for v in quad.to_list())


def _attrs(pairs: Sequence[tuple[str, str | int | None]]) -> str:
    return "".join(f" {name}={quoteattr(str(value))}" for name, value in pairs if value is not None)


def render_page_section(result: OcrResult, image: PageImage, page_num: int | None = None) -> str:
    """Render the ``<section>`` fragment of one page or image."""
    metrics = OcrMetrics.from_result(result)
    header = _attrs(
        [
            ("class", "ocrPage"),
            ("data-page-num", page_num),
            ("data-src-name", image.source_name),
            ("data-img-width", image.width),
            ("data-img-height", image.height),
            ("data-angle", format_number(result.text_angle)),
            ("data-segments-count", metrics.line_count),
            ("data-words-count", metrics.word_count),
            ("data-average-confidence", format_confidence(metrics.average_confidence)),
            ("data-high-conf-ratio", format_confidence(metrics.high_ratio)),
            ("data-medium-conf-ratio", format_confidence(metrics.medium_ratio)),
            ("data-low-conf-ratio", format_confidence(metrics.low_ratio)),
        ]
    )

    parts = [f"<section{header}>", '<div class="ocrContent">']
    word_index = 0
    for num, line in enumerate(result.lines, start=1):
        bounds = format_bounds(line.bbox) if line.bbox else None
        parts.append(f"<segment{_attrs([('num', num), ('b', bounds)])}>")
        words = []
        for word in line.words:
            attrs = _attrs(
                [
                    ("i", f"#{word_index}"),
                    ("p", format_confidence(word.confidence)),
                    ("b", format_bounds(word.bbox) if word.bbox else None),
                ]
            )
            words.append(f"<w{attrs}>{escape(word.text)}</w>")
            word_index += 1
        parts.append(" ".join(words))
        parts.append("</segment>")
    parts.append("</div>")
    parts.append("</section>")
    return "\n".join(parts)


def _wrap_document(title: str, metas: Sequence[tuple[str, str]], body: str) -> str:
    head_metas = "\n".join(f"<meta name={quoteattr(name)} content={quoteattr(content)}/>" for name, content in metas)
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            "<!DOCTYPE html>",
            f'<html xmlns="{XHTML_NS}">',
            "<head>",
            '<meta charset="UTF-8"/>',
            head_metas,
            f"<title>{escape(title)}</title>",
            "</head>",
            "<body>",
            body,
            "</body>",
            "</html>",
            "",
        ]
    )


def render_page_document(section: str, source_name: str, timestamp: str) -> str:
    """Wrap a single page or image section in a standalone XHTML document."""
    return _wrap_document(
        f"{source_name} ({FORMAT_NAME})",
        [("format", FORMAT_NAME), ("timestamp", timestamp)],
        section,
    )


def extract_section(markup: str) -> str:
    """Return the ``<section>`` fragment of a per-page XHTML document, byte for byte.

    Raises:
        FileFormatError: If the markup holds no section
    """
    match = _SECTION_RE.search(markup)
    if match is None:
        raise FileFormatError("No <section> element found in page markup")
    return match.group(0)


def _section_attr(section: str, name: str, default: str = "0") -> str:
    match = re.search(_ATTR_RE.format(name=re.escape(name)), section)
    return match.group(1) if match else default


def render_combined_document(document_name: str, sections: Sequence[str]) -> str:
    """Combine page sections (already in ascending page order) into one document.

    Head metadata is derived from the section attributes only, so the output
    depends on nothing but its inputs.
    """
    total_words = 0
    total_segments = 0
    weighted_confidence = 0.0
    for section in sections:
        words = int(_section_attr(section, "data-words-count"))
        total_words += words
        total_segments += int(_section_attr(section, "data-segments-count"))
        weighted_confidence += words * float(_section_attr(section, "data-average-confidence"))

    average = weighted_confidence / total_words if total_words else 0.0
    return _wrap_document(
        f"{document_name} ({FORMAT_NAME})",
        [
            ("format", FORMAT_NAME),
            ("pagesCount", str(len(sections))),
            ("totalWords", str(total_words)),
            ("totalSegments", str(total_segments)),
            ("averageConfidence", format_confidence(average)),
        ],
        "\n".join(sections),
    )
