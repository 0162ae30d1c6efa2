"""Per-page processing types."""

from __future__ import annotations

from dataclasses import dataclass

from .ocr import OcrResult


@dataclass(frozen=True)
class PageImage:
    """Metadata of the bitmap a page was recognised from.

    Attributes:
        source_name: File name of the preview image (or of the source image)
        width: Bitmap width in pixels
        height: Bitmap height in pixels
    """

    source_name: str
    width: int
    height: int


@dataclass
class PageResult:
    """Recognition result of one page of a multi-page unit.

    Attributes:
        page_num: 1-based page number
        result: Recognition result (empty when recognition failed)
        image: Bitmap metadata
        error: Recognition failure message, if any
    """

    page_num: int
    result: OcrResult
    image: PageImage
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None
