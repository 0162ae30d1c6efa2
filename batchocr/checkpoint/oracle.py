"""Checkpoint detection from filesystem artifacts.

Resume state lives entirely in the artifacts a run produces. A page, image or
document counts as done when its artifacts exist and validate; every check
here is a handful of ``stat`` calls so it can run before any rendering.

Validity rules:
    - preview images and markup files must be non-empty
    - text files may be empty (a blank page is a valid result)
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from ..constants import DEFAULT_IMAGE_FORMAT
from ..io.naming import ArtifactNaming

TEXT_EXT = "txt"
MARKUP_EXT = "xhtml"
JSON_EXT = "json"


def _stat_size(path: Path) -> int | None:
    """Return the file size, or None when the path is missing or not a file."""
    try:
        st = os.stat(path)
    except OSError:
        return None
    if not stat.S_ISREG(st.st_mode):
        return None
    return st.st_size


def exists(path: Path) -> bool:
    return _stat_size(path) is not None


def exists_non_empty(path: Path) -> bool:
    size = _stat_size(path)
    return size is not None and size > 0


@dataclass(frozen=True)
class PageArtifactPaths:
    """The artifact triple of one page."""

    preview: Path
    text: Path
    markup: Path

    def is_valid(self) -> bool:
        return exists_non_empty(self.preview) and exists(self.text) and exists_non_empty(self.markup)


class CheckpointOracle:
    """Answers "is this already done?" for one source file's output directory.

    Example:
        >>> oracle = CheckpointOracle(Path("out/report.pdf.oneocr"), ArtifactNaming("report.pdf", 10))
        >>> oracle.is_document_done()
        False
        >>> oracle.missing_pages()
        [1, 2, 3, 4, 5, 6, 7, 8, 9, 10]
    """

    def __init__(self, output_dir: Path, naming: ArtifactNaming, image_format: str = DEFAULT_IMAGE_FORMAT):
        self.output_dir = Path(output_dir)
        self.naming = naming
        self.image_ext = image_format.lower()

    # ==================== Pages ====================

    def page_paths(self, page_num: int) -> PageArtifactPaths:
        return PageArtifactPaths(
            preview=self.output_dir / self.naming.page(page_num, self.image_ext),
            text=self.output_dir / self.naming.page(page_num, TEXT_EXT),
            markup=self.output_dir / self.naming.page(page_num, MARKUP_EXT),
        )

    def is_page_done(self, page_num: int) -> bool:
        return self.page_paths(page_num).is_valid()

    def missing_pages(self) -> list[int]:
        return [p for p in range(1, self.naming.total_pages + 1) if not self.is_page_done(p)]

    # ==================== Documents ====================

    def combined_paths(self) -> tuple[Path, Path]:
        return (
            self.output_dir / self.naming.combined(TEXT_EXT),
            self.output_dir / self.naming.combined(MARKUP_EXT),
        )

    def is_document_done(self) -> bool:
        """Both combined artifacts exist and are non-empty."""
        text_path, markup_path = self.combined_paths()
        return exists_non_empty(text_path) and exists_non_empty(markup_path)

    def final_range_paths(self) -> tuple[Path, Path] | None:
        """Return the full-range merge artifacts when both exist and are non-empty."""
        total = self.naming.total_pages
        text_path = self.output_dir / self.naming.range(1, total, TEXT_EXT)
        markup_path = self.output_dir / self.naming.range(1, total, MARKUP_EXT)
        if exists_non_empty(text_path) and exists_non_empty(markup_path):
            return text_path, markup_path
        return None

    def range_artifacts(self) -> list[Path]:
        """All merge-in-progress artifacts of this source currently on disk."""
        if not self.output_dir.is_dir():
            return []
        return sorted(p for p in self.output_dir.iterdir() if self.naming.parse_range(p.name) is not None)

    # ==================== Single images ====================

    def image_paths(self) -> tuple[Path, Path, Path]:
        """Text, markup and JSON artifacts of a single-image unit."""
        return (
            self.output_dir / self.naming.combined(TEXT_EXT),
            self.output_dir / self.naming.combined(MARKUP_EXT),
            self.output_dir / self.naming.combined(JSON_EXT),
        )

    def is_image_done(self) -> bool:
        text_path, markup_path, json_path = self.image_paths()
        return exists(text_path) and exists_non_empty(markup_path) and exists_non_empty(json_path)
