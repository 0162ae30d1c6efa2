"""Input conversion: image loading and PDF page rendering."""

from .image import load_image
from .pdf import (
    PdfInfo,
    PdfPageRenderer,
    calculate_target_dpi,
    estimate_page_count,
    get_pdf_info,
    open_page_renderer,
    render_pdf_page,
    resolve_target_dpi,
)

__all__ = [
    "load_image",
    "PdfInfo",
    "PdfPageRenderer",
    "calculate_target_dpi",
    "estimate_page_count",
    "get_pdf_info",
    "open_page_renderer",
    "render_pdf_page",
    "resolve_target_dpi",
]
