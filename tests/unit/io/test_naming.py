"""Tests for deterministic artifact naming."""

from __future__ import annotations

from pathlib import Path

from batchocr.io.naming import ArtifactNaming, document_output_dir, mirror_output_path


class TestArtifactNaming:
    """Tests for ArtifactNaming."""

    def test_page_padding_follows_total_digits(self):
        assert ArtifactNaming("doc.pdf", 9).page(3, "txt") == "doc.pdf.pg3.txt"
        assert ArtifactNaming("doc.pdf", 10).page(3, "txt") == "doc.pdf.pg03.txt"
        assert ArtifactNaming("doc.pdf", 120).page(7, "xhtml") == "doc.pdf.pg007.xhtml"

    def test_range_and_combined(self):
        naming = ArtifactNaming("doc.pdf", 12)
        assert naming.range(1, 7, "txt") == "doc.pdf.pg[1-7].txt"
        assert naming.combined("xhtml") == "doc.pdf.oneocr.xhtml"

    def test_parse_range_matches_own_artifacts_only(self):
        naming = ArtifactNaming("doc.pdf", 12)
        assert naming.parse_range("doc.pdf.pg[1-7].txt") == (1, 7, "txt")
        assert naming.parse_range("other.pdf.pg[1-7].txt") is None
        assert naming.parse_range("doc.pdf.pg07.txt") is None


class TestOutputPaths:
    """Tests for output mirroring."""

    def test_mirror_output_path(self):
        path = mirror_output_path(Path("/in/a/b.pdf"), Path("/in"), Path("/out"), ".oneocr")
        assert path == Path("/out/a/b.pdf.oneocr")

    def test_document_output_dir_defaults_next_to_source(self):
        assert document_output_dir(Path("/data/r.pdf")) == Path("/data/r.pdf.oneocr")

    def test_document_output_dir_under_output_root(self):
        assert document_output_dir(Path("/data/r.pdf"), Path("/out")) == Path("/out/r.pdf.oneocr")

    def test_document_output_dir_mirrored(self):
        path = document_output_dir(Path("/in/x/r.pdf"), Path("/out"), Path("/in"))
        assert path == Path("/out/x/r.pdf.oneocr")
