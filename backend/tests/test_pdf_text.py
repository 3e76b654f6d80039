"""Tests for the PDF text service, using small PDFs built with PyMuPDF."""

from __future__ import annotations

from unittest.mock import patch

import fitz
import pytest

from estimo.exceptions import ExtractionError
from estimo.models.project import SourceFile
from estimo.services.pdf_text import PdfTextExtractor


@pytest.fixture()
def sample_pdf() -> SourceFile:
    """A 1-page drawing with body text and a title block."""
    doc = fitz.open()
    page = doc.new_page(width=612, height=792)
    page.insert_text((72, 100), "FOUNDATION PLAN", fontsize=14)
    page.insert_text((72, 140), "F1 6'-0\" x 6'-0\" x 2'-0\"", fontsize=10)
    page.insert_text((400, 700), "Sheet S-101", fontsize=10)
    content = doc.tobytes()
    doc.close()
    return SourceFile("S-101.pdf", content)


@pytest.fixture()
def multi_page_pdf() -> SourceFile:
    doc = fitz.open()
    for i in range(3):
        page = doc.new_page(width=612, height=792)
        page.insert_text((72, 100), f"Page {i + 1} content", fontsize=12)
    content = doc.tobytes()
    doc.close()
    return SourceFile("multi.pdf", content)


class TestExtract:
    def test_page_text_and_title_block(self, sample_pdf: SourceFile) -> None:
        result = PdfTextExtractor().extract(sample_pdf)
        assert result.page_count == 1
        assert "FOUNDATION PLAN" in result.text
        assert result.pages[0].title_block_text is not None
        assert "S-101" in result.pages[0].title_block_text

    def test_max_pages(self, multi_page_pdf: SourceFile) -> None:
        result = PdfTextExtractor(max_pages=2).extract(multi_page_pdf)
        assert result.page_count == 3
        assert len(result.pages) == 2

    def test_unreadable_page_skipped(self, multi_page_pdf: SourceFile) -> None:
        get_text = fitz.Page.get_text

        def failing_second_page(page: fitz.Page, *args: object, **kwargs: object) -> object:
            if page.number == 1:
                raise RuntimeError("damaged content stream")
            return get_text(page, *args, **kwargs)

        with patch.object(fitz.Page, "get_text", failing_second_page):
            result = PdfTextExtractor().extract(multi_page_pdf)

        assert result.page_count == 3
        assert [p.page_number for p in result.pages] == [1, 3]
        assert "Page 3 content" in result.text

    def test_not_a_pdf(self) -> None:
        with pytest.raises(ExtractionError, match="Failed to open PDF"):
            PdfTextExtractor().extract(SourceFile("bad.pdf", b"not a pdf at all"))


class TestExtractAll:
    def test_headers_and_skips(self, sample_pdf: SourceFile) -> None:
        text = PdfTextExtractor().extract_all(
            [
                sample_pdf,
                SourceFile("photo.png", b"\x89PNG"),
                SourceFile("broken.pdf", b"garbage"),
            ]
        )
        assert "--- S-101.pdf page 1 ---" in text
        assert "[title block]" in text
        assert "photo.png" not in text
        assert "broken.pdf" not in text

    def test_truncation(self, multi_page_pdf: SourceFile) -> None:
        text = PdfTextExtractor().extract_all([multi_page_pdf], max_chars=30)
        assert len(text) == 30
