"""Merging per-page artifacts into combined document artifacts.

A merge is a pure function of the page artifacts: page texts joined in
ascending page order, and the per-page ``<section>`` fragments embedded
verbatim in one XHTML document. Merging from live results or from files on
disk therefore yields the same bytes, and repeating a merge is always safe.

During a live run the merge is advanced after every page: the longest
contiguous prefix ``1..k`` of finished pages is written as
``name.pg[1-k].{txt,xhtml}`` and older range artifacts are removed, so an
interrupted run leaves its latest complete prefix on disk.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from ..checkpoint.oracle import MARKUP_EXT, TEXT_EXT, CheckpointOracle
from ..conversion.output.plaintext import join_page_texts
from ..conversion.output.xhtml import extract_section, render_combined_document, render_page_section
from ..exceptions import FileLoadError, FileSaveError, MergeError
from ..io.atomic import atomic_write_bytes, atomic_write_text
from ..types import PageResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageArtifact:
    """The mergeable content of one finished page."""

    page_num: int
    text: str
    section: str

    @classmethod
    def from_page_result(cls, page: PageResult) -> PageArtifact:
        return cls(
            page_num=page.page_num,
            text=page.result.text,
            section=render_page_section(page.result, page.image, page.page_num),
        )


def load_page_artifact(oracle: CheckpointOracle, page_num: int) -> PageArtifact:
    """Read a finished page back from its text and markup files.

    Raises:
        FileLoadError: If the files cannot be read or the markup has no section
    """
    paths = oracle.page_paths(page_num)
    try:
        text = paths.text.read_text(encoding="utf-8")
        markup = paths.markup.read_text(encoding="utf-8")
        return PageArtifact(page_num=page_num, text=text, section=extract_section(markup))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        raise FileLoadError(f"Cannot read artifacts of page {page_num}: {e}") from e


def merge_artifacts(document_name: str, artifacts: Iterable[PageArtifact]) -> tuple[str, str]:
    """Return (combined text, combined markup) for the given pages in ascending order."""
    ordered = sorted(artifacts, key=lambda a: a.page_num)
    text = join_page_texts(a.text for a in ordered)
    markup = render_combined_document(document_name, [a.section for a in ordered])
    return text, markup


class MergeStage:
    """Incremental and from-disk merging for one document.

    Thread-safe: workers may ``add`` and ``advance`` concurrently.

    Example:
        >>> merger = MergeStage(oracle, "report.pdf")
        >>> merger.add(PageArtifact.from_page_result(page))
        >>> merger.advance()          # rewrites report.pdf.pg[1-k].*
        >>> merger.finalize()         # writes report.pdf.oneocr.*
    """

    def __init__(self, oracle: CheckpointOracle, document_name: str):
        self.oracle = oracle
        self.document_name = document_name
        self._artifacts: dict[int, PageArtifact] = {}
        self._merged_prefix = 0
        self._lock = threading.Lock()

    @property
    def merged_prefix(self) -> int:
        return self._merged_prefix

    def add(self, artifact: PageArtifact) -> None:
        with self._lock:
            self._artifacts[artifact.page_num] = artifact

    def load_existing(self, page_num: int) -> PageArtifact:
        """Load a checkpointed page from disk and keep it for later merges."""
        artifact = load_page_artifact(self.oracle, page_num)
        self.add(artifact)
        return artifact

    # ==================== Incremental ====================

    def advance(self) -> int:
        """Write the range artifacts for the longest contiguous finished prefix.

        Returns:
            The merged prefix length after this call
        """
        with self._lock:
            prefix = self._merged_prefix
            while prefix + 1 in self._artifacts:
                prefix += 1
            if prefix == self._merged_prefix:
                return prefix

            text, markup = merge_artifacts(self.document_name, (self._artifacts[p] for p in range(1, prefix + 1)))
            naming = self.oracle.naming
            out = self.oracle.output_dir
            keep = {naming.range(1, prefix, TEXT_EXT), naming.range(1, prefix, MARKUP_EXT)}
            atomic_write_text(out / naming.range(1, prefix, TEXT_EXT), text)
            atomic_write_text(out / naming.range(1, prefix, MARKUP_EXT), markup)
            self._remove_range_artifacts(keep)
            self._merged_prefix = prefix
            logger.debug("Merged pages 1-%d of %s", prefix, self.document_name)
            return prefix

    def _remove_range_artifacts(self, keep: set[str] | None = None) -> None:
        for path in self.oracle.range_artifacts():
            if keep and path.name in keep:
                continue
            path.unlink(missing_ok=True)

    # ==================== Final ====================

    def finalize(self) -> tuple[Path, Path]:
        """Write the combined artifacts from every page and drop range artifacts.

        Pages not added during this run are read back from disk.

        Raises:
            MergeError: If any page lacks a complete artifact set
        """
        total = self.oracle.naming.total_pages
        with self._lock:
            have = set(self._artifacts)
        missing = [p for p in range(1, total + 1) if p not in have and not self.oracle.is_page_done(p)]
        if missing:
            raise MergeError(
                f"Cannot merge {self.document_name}: {len(missing)} page(s) incomplete",
                missing_pages=missing,
            )

        for page_num in range(1, total + 1):
            if page_num not in have:
                self.load_existing(page_num)

        with self._lock:
            text, markup = merge_artifacts(self.document_name, self._artifacts.values())
        text_path, markup_path = self.oracle.combined_paths()
        atomic_write_text(text_path, text)
        atomic_write_text(markup_path, markup)
        self._remove_range_artifacts()
        logger.debug("Wrote combined artifacts for %s (%d pages)", self.document_name, total)
        return text_path, markup_path

    def promote_final_range(self) -> bool:
        """Turn existing full-range artifacts into the combined artifacts.

        Returns:
            True if the combined artifacts now exist
        """
        paths = self.oracle.final_range_paths()
        if paths is None:
            return False
        text_src, markup_src = paths
        text_path, markup_path = self.oracle.combined_paths()
        try:
            atomic_write_bytes(text_path, text_src.read_bytes())
            atomic_write_bytes(markup_path, markup_src.read_bytes())
        except OSError as e:
            raise FileSaveError(f"Cannot promote range artifacts of {self.document_name}: {e}") from e
        self._remove_range_artifacts()
        logger.debug("Promoted full-range artifacts of %s", self.document_name)
        return True


def rebuild_from_disk(oracle: CheckpointOracle, document_name: str) -> tuple[Path, Path]:
    """Rebuild a document's combined artifacts purely from page files on disk."""
    return MergeStage(oracle, document_name).finalize()
