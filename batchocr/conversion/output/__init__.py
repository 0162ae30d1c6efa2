"""Output renderers: plain text, semantic XHTML, compact JSON and SVG overlays."""

from .json import result_to_compact_dict, result_to_compact_json
from .plaintext import join_page_texts, structured_text
from .svg import render_svg_overlay
from .xhtml import (
    extract_section,
    format_confidence,
    format_number,
    render_combined_document,
    render_page_document,
    render_page_section,
)

__all__ = [
    "result_to_compact_dict",
    "result_to_compact_json",
    "join_page_texts",
    "structured_text",
    "render_svg_overlay",
    "extract_section",
    "format_confidence",
    "format_number",
    "render_combined_document",
    "render_page_document",
    "render_page_section",
]
