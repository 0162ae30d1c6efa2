"""Tests for checkpoint detection."""

from __future__ import annotations

from pathlib import Path

import pytest

from batchocr.checkpoint.oracle import CheckpointOracle
from batchocr.io.naming import ArtifactNaming


def _write_page(out: Path, naming: ArtifactNaming, page: int, text: str = "t", markup: str = "<section/>", preview: bytes = b"img"):
    out.mkdir(parents=True, exist_ok=True)
    (out / naming.page(page, "png")).write_bytes(preview)
    (out / naming.page(page, "txt")).write_text(text, encoding="utf-8")
    (out / naming.page(page, "xhtml")).write_text(markup, encoding="utf-8")


@pytest.fixture
def oracle(tmp_path: Path) -> CheckpointOracle:
    return CheckpointOracle(tmp_path / "doc.pdf.oneocr", ArtifactNaming("doc.pdf", 10), "png")


class TestPageCheckpoints:
    """Tests for per-page validity."""

    def test_complete_triple_is_done(self, oracle):
        _write_page(oracle.output_dir, oracle.naming, 1)
        assert oracle.is_page_done(1)

    def test_empty_text_is_still_done(self, oracle):
        _write_page(oracle.output_dir, oracle.naming, 2, text="")
        assert oracle.is_page_done(2)

    def test_empty_markup_is_not_done(self, oracle):
        _write_page(oracle.output_dir, oracle.naming, 3, markup="")
        assert not oracle.is_page_done(3)

    def test_empty_preview_is_not_done(self, oracle):
        _write_page(oracle.output_dir, oracle.naming, 4, preview=b"")
        assert not oracle.is_page_done(4)

    def test_missing_text_is_not_done(self, oracle):
        _write_page(oracle.output_dir, oracle.naming, 5)
        (oracle.output_dir / oracle.naming.page(5, "txt")).unlink()
        assert not oracle.is_page_done(5)

    def test_leftover_temp_file_is_not_done(self, oracle):
        _write_page(oracle.output_dir, oracle.naming, 6)
        markup = oracle.output_dir / oracle.naming.page(6, "xhtml")
        markup.rename(markup.with_name(markup.name + ".tmp"))
        assert not oracle.is_page_done(6)

    def test_missing_pages(self, oracle):
        for page in (1, 2, 3, 5):
            _write_page(oracle.output_dir, oracle.naming, page)

        assert oracle.missing_pages() == [4, 6, 7, 8, 9, 10]


class TestDocumentCheckpoints:
    """Tests for combined and range artifacts."""

    def test_document_done_needs_both_non_empty(self, oracle):
        text_path, markup_path = oracle.combined_paths()
        oracle.output_dir.mkdir(parents=True)
        text_path.write_text("all", encoding="utf-8")
        assert not oracle.is_document_done()

        markup_path.write_text("", encoding="utf-8")
        assert not oracle.is_document_done()

        markup_path.write_text("<html/>", encoding="utf-8")
        assert oracle.is_document_done()

    def test_missing_directory_means_not_done(self, oracle):
        assert not oracle.is_document_done()
        assert oracle.range_artifacts() == []

    def test_final_range_paths(self, oracle):
        oracle.output_dir.mkdir(parents=True)
        (oracle.output_dir / "doc.pdf.pg[1-10].txt").write_text("x", encoding="utf-8")
        assert oracle.final_range_paths() is None

        (oracle.output_dir / "doc.pdf.pg[1-10].xhtml").write_text("<html/>", encoding="utf-8")
        assert oracle.final_range_paths() is not None

    def test_range_artifacts_lists_only_this_document(self, oracle):
        oracle.output_dir.mkdir(parents=True)
        for name in ("doc.pdf.pg[1-3].txt", "doc.pdf.pg[1-3].xhtml", "other.pdf.pg[1-3].txt", "doc.pdf.pg01.txt"):
            (oracle.output_dir / name).write_text("x", encoding="utf-8")

        assert [p.name for p in oracle.range_artifacts()] == ["doc.pdf.pg[1-3].txt", "doc.pdf.pg[1-3].xhtml"]


class TestImageCheckpoints:
    """Tests for single-image units."""

    def test_image_done_requires_all_three(self, tmp_path: Path):
        oracle = CheckpointOracle(tmp_path, ArtifactNaming("scan.png"))
        text_path, markup_path, json_path = oracle.image_paths()
        assert text_path.name == "scan.png.oneocr.txt"

        text_path.write_text("", encoding="utf-8")
        markup_path.write_text("<html/>", encoding="utf-8")
        assert not oracle.is_image_done()

        json_path.write_text("{}", encoding="utf-8")
        assert oracle.is_image_done()
