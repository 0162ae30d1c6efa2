"""Tests for the text, XHTML, JSON and SVG renderers."""

from __future__ import annotations

import json

import pytest

from batchocr.conversion.output import (
    extract_section,
    format_confidence,
    format_number,
    join_page_texts,
    render_combined_document,
    render_page_document,
    render_page_section,
    render_svg_overlay,
    result_to_compact_dict,
    result_to_compact_json,
    structured_text,
)
from batchocr.exceptions import FileFormatError
from batchocr.types import OcrLine, OcrResult, OcrWord, PageImage


@pytest.fixture
def image() -> PageImage:
    return PageImage(source_name="scan.png", width=60, height=40)


class TestFormatting:
    @pytest.mark.parametrize(("value", "expected"), [(0.9, "0.9"), (1.0, "1"), (0.123456, "0.123"), (0.0, "0")])
    def test_format_confidence(self, value, expected):
        assert format_confidence(value) == expected

    @pytest.mark.parametrize(("value", "expected"), [(10.0, "10"), (10.25, "10.2"), (3, "3")])
    def test_format_number(self, value, expected):
        assert format_number(value) == expected


class TestPlainText:
    def test_join_page_texts(self):
        assert join_page_texts(["page 1", "", "page 3"]) == "page 1\n\npage 3"

    def test_structured_text(self, sample_result):
        text = structured_text(sample_result, show_confidence=True, show_bounds=True)

        assert text.startswith("=== OCR Results ===\nLines: 2\nWords: 3\n")
        assert 'Line 1: "Hello world"' in text
        assert '"Hello"(0.98) "world"(0.62)' in text
        assert "Bounds: (0,0)-(45,10)" in text

    def test_structured_text_hides_details_by_default(self, sample_result):
        text = structured_text(sample_result)
        assert "Words:" not in text.split("\n", 3)[3]
        assert "Bounds" not in text


class TestXhtml:
    """Tests for semantic XHTML rendering."""

    def test_section_attributes_and_words(self, sample_result, image):
        section = render_page_section(sample_result, image, page_num=2)

        assert section.startswith('<section class="ocrPage" data-page-num="2" data-src-name="scan.png"')
        assert 'data-words-count="3"' in section
        assert 'data-segments-count="2"' in section
        assert '<w i="#0" p="0.98" b="0 0 20 0 20 10 0 10">Hello</w>' in section
        assert '<w i="#2" p="0.3"' in section
        assert section.endswith("</section>")

    def test_image_section_has_no_page_number(self, sample_result, image):
        assert "data-page-num" not in render_page_section(sample_result, image)

    def test_word_text_is_escaped(self, image):
        result = OcrResult(lines=[OcrLine(text="a<b", words=[OcrWord("a<b&c", 0.9)])])
        section = render_page_section(result, image)
        assert ">a&lt;b&amp;c</w>" in section

    def test_extract_section_is_verbatim(self, sample_result, image):
        section = render_page_section(sample_result, image, page_num=1)
        document = render_page_document(section, "page.webp", "2024-01-01T00:00:00+00:00")

        assert extract_section(document) == section
        assert '<meta name="timestamp" content="2024-01-01T00:00:00+00:00"/>' in document

    def test_extract_section_requires_section(self):
        with pytest.raises(FileFormatError):
            extract_section("<html><body></body></html>")

    def test_combined_document_metadata(self, sample_result, image):
        first = render_page_section(sample_result, image, page_num=1)
        second = render_page_section(OcrResult.empty(), image, page_num=2)

        combined = render_combined_document("doc.pdf", [first, second])

        assert '<meta name="pagesCount" content="2"/>' in combined
        assert '<meta name="totalWords" content="3"/>' in combined
        assert '<meta name="totalSegments" content="2"/>' in combined
        assert '<meta name="averageConfidence" content="0.633"/>' in combined
        assert combined.index(first) < combined.index(second)

    def test_combined_document_is_deterministic(self, sample_result, image):
        sections = [render_page_section(sample_result, image, page_num=1)]
        assert render_combined_document("doc.pdf", sections) == render_combined_document("doc.pdf", sections)


class TestCompactJson:
    def test_positional_word_encoding(self, sample_result, image):
        data = result_to_compact_dict(sample_result, image, timestamp="2024-01-01T00:00:00+00:00")

        assert data["meta"]["file"] == "scan.png"
        assert data["meta"]["imgSize"] == "60x40"
        assert data["meta"]["metrics"]["wordsCount"] == 3
        assert data["lines"][0][0] == [0, 0, 45, 0, 45, 10, 0, 10]
        assert data["lines"][0][1][1] == ["#1", "world", 0.62, "", [25, 0, 45, 0, 45, 10, 25, 10]]
        assert data["lines"][1][1][0][0] == "#2"

    def test_json_is_single_line(self, sample_result, image):
        text = result_to_compact_json(sample_result, image, timestamp="t")
        assert "\n" not in text
        assert json.loads(text)["meta"]["timestampUTCISO"] == "t"


class TestSvgOverlay:
    def test_boxes_coloured_by_confidence(self, sample_result, image):
        svg = render_svg_overlay(sample_result, image)

        assert svg.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert 'href="scan.png"' in svg
        assert 'class="word-box-high"' in svg
        assert 'class="word-box-med"' in svg
        assert 'class="word-box-low"' in svg
        assert svg.count('class="line-box"') == 2
        assert '<g id="word-text">' not in svg

    def test_show_text_layer(self, sample_result, image):
        assert '<g id="word-text">' in render_svg_overlay(sample_result, image, show_text=True)
