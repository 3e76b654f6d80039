"""PDF text service — pulls the text layer out of drawing PDFs with PyMuPDF."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import fitz  # type: ignore[import-untyped]

from estimo.exceptions import ExtractionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from estimo.models.project import SourceFile

logger = logging.getLogger(__name__)

_MAX_PAGES = 60
_MAX_CHARS = 120_000


@dataclass(frozen=True)
class PageText:
    """Text of a single PDF page."""

    page_number: int
    text: str
    title_block_text: str | None


@dataclass(frozen=True)
class PdfText:
    """Text of an entire PDF."""

    filename: str
    pages: list[PageText] = field(default_factory=list)
    page_count: int = 0

    @property
    def text(self) -> str:
        return "\n".join(p.text for p in self.pages)


class PdfTextExtractor:
    """Extracts the text layer of PDF drawings, page by page."""

    def __init__(self, max_pages: int = _MAX_PAGES) -> None:
        self._max_pages = max_pages

    def extract(self, source: SourceFile) -> PdfText:
        """Extract text from every page of *source* (up to ``max_pages``).

        Raises
        ------
        ExtractionError
            If *source* is not a readable PDF.
        """
        try:
            doc = fitz.open(stream=source.content, filetype="pdf")
        except Exception as exc:
            msg = f"Failed to open PDF: {source.filename}"
            raise ExtractionError(msg) from exc

        try:
            pages: list[PageText] = []
            for page_num in range(min(doc.page_count, self._max_pages)):
                try:
                    page = doc[page_num]
                    text = page.get_text()
                    title_block = self._extract_title_block(page)
                except Exception as exc:  # noqa: BLE001 - skip the page, keep the file
                    logger.warning(
                        "Skipping unreadable page %d of %s: %s",
                        page_num + 1,
                        source.filename,
                        exc,
                    )
                    continue
                pages.append(
                    PageText(
                        page_number=page_num + 1,
                        text=text,
                        title_block_text=title_block,
                    )
                )
            return PdfText(
                filename=source.filename,
                pages=pages,
                page_count=doc.page_count,
            )
        finally:
            doc.close()

    def extract_all(
        self, sources: Sequence[SourceFile], max_chars: int = _MAX_CHARS
    ) -> str:
        """Concatenate the text of every PDF in *sources*, with page headers.

        Non-PDF files are skipped; unreadable PDFs are logged and skipped.
        """
        parts: list[str] = []
        for source in sources:
            if not source.is_pdf:
                continue
            try:
                result = self.extract(source)
            except ExtractionError as exc:
                logger.warning("Skipping unreadable PDF %s: %s", source.filename, exc)
                continue
            for page in result.pages:
                parts.append(f"--- {source.filename} page {page.page_number} ---")
                if page.title_block_text:
                    title = " ".join(page.title_block_text.split())
                    parts.append(f"[title block] {title[:200]}")
                parts.append(page.text.strip())
        text = "\n".join(parts)
        if len(text) > max_chars:
            logger.info("Truncating extracted text from %d to %d chars", len(text), max_chars)
            text = text[:max_chars]
        return text

    @staticmethod
    def _extract_title_block(page: fitz.Page) -> str | None:
        """Extract text from the bottom-right quadrant (title block area)."""
        rect = page.rect
        mid_x = (rect.x0 + rect.x1) / 2
        mid_y = (rect.y0 + rect.y1) / 2
        clip = fitz.Rect(mid_x, mid_y, rect.x1, rect.y1)
        text = page.get_text(clip=clip).strip()
        return text if text else None
