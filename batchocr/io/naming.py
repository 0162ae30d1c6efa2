"""Deterministic artifact naming.

All names derive from the source file name (extension included) and, for
per-page artifacts, a page index zero-padded to the digit count of the
document's page total::

    report.pdf.pg07.txt         per-page artifact
    report.pdf.pg[1-7].xhtml    merge-in-progress artifact
    report.pdf.oneocr.txt       combined artifact
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from ..constants import COMBINED_MARKER

RANGE_PATTERN = re.compile(r"^(?P<name>.+)\.pg\[(?P<start>\d+)-(?P<end>\d+)\]\.(?P<ext>\w+)$")


@dataclass(frozen=True)
class ArtifactNaming:
    """Naming scheme for one source file.

    Attributes:
        name: Source file name including its extension
        total_pages: Page total used for zero padding (1 for images)
    """

    name: str
    total_pages: int = 1

    @property
    def pad_width(self) -> int:
        return len(str(max(1, self.total_pages)))

    def page(self, page_num: int, ext: str) -> str:
        return f"{self.name}.pg{page_num:0{self.pad_width}d}.{ext}"

    def range(self, start: int, end: int, ext: str) -> str:
        return f"{self.name}.pg[{start}-{end}].{ext}"

    def combined(self, ext: str) -> str:
        return f"{self.name}.{COMBINED_MARKER}.{ext}"

    def parse_range(self, file_name: str) -> tuple[int, int, str] | None:
        """Return (start, end, ext) if ``file_name`` is one of this source's range artifacts."""
        match = RANGE_PATTERN.match(file_name)
        if match is None or match.group("name") != self.name:
            return None
        return int(match.group("start")), int(match.group("end")), match.group("ext")


def mirror_output_path(input_file: Path, input_root: Path, output_root: Path, suffix: str) -> Path:
    """Map an input file to ``output_root / (relative path + suffix)``.

    Example:
        >>> mirror_output_path(Path("/in/a/b.pdf"), Path("/in"), Path("/out"), ".oneocr")
        PosixPath('/out/a/b.pdf.oneocr')
    """
    relative = input_file.relative_to(input_root)
    return output_root / relative.parent / (relative.name + suffix)


def document_output_dir(pdf_path: Path, output_root: Path | None = None, input_root: Path | None = None) -> Path:
    """Directory holding a document's page and combined artifacts.

    Defaults to ``<pdf>.oneocr`` next to the source. With both roots given,
    the directory is mirrored under ``output_root``.
    """
    suffix = f".{COMBINED_MARKER}"
    if output_root is not None and input_root is not None:
        return mirror_output_path(pdf_path, input_root, output_root, suffix)
    if output_root is not None:
        return output_root / (pdf_path.name + suffix)
    return pdf_path.with_name(pdf_path.name + suffix)
