"""
Module 1: PDF text extraction
Goal: Read the text layer of every page, in page order, from an in-memory PDF
"""
import logging
from typing import List

import fitz  # PyMuPDF

from medreport.errors import DocumentParseError

logger = logging.getLogger("medreport.pdf_extractor")


class PDFTextExtractor:
    def __init__(self, max_pages: int = 200, max_page_chars: int = 200_000,
                 keep_line_breaks: bool = False):
        self.max_pages = max_pages
        self.max_page_chars = max_page_chars
        self.keep_line_breaks = keep_line_breaks

    @classmethod
    def from_settings(cls, settings):
        return cls(
            max_pages=settings.max_pages,
            max_page_chars=settings.max_page_chars,
            keep_line_breaks=settings.keep_line_breaks,
        )

    def extract(self, data: bytes) -> List[str]:
        """Return one text string per page; a page that fails yields ""."""
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise DocumentParseError(f"Could not open PDF: {e}") from e

        with doc:
            if doc.needs_pass:
                raise DocumentParseError("PDF is password protected")
            if doc.page_count > self.max_pages:
                raise DocumentParseError(
                    f"PDF has {doc.page_count} pages, limit is {self.max_pages}"
                )

            pages = []
            for i in range(doc.page_count):
                try:
                    text = self._page_text(doc.load_page(i))
                except Exception as e:
                    logger.warning("Error processing page %d: %s", i + 1, e)
                    text = ""
                pages.append(self._clip(text, i))

        logger.info("Extracted text from %d page(s)", len(pages))
        return pages

    def _page_text(self, page) -> str:
        lines = []
        for block in page.get_text("dict").get("blocks", []):
            if block.get("type") != 0:  # image block
                continue
            for line in block.get("lines", []):
                fragments = [s.get("text", "") for s in line.get("spans", [])]
                lines.append(self.get_line_text(fragments))
        sep = "\n" if self.keep_line_breaks else " "
        return sep.join(l for l in lines if l)

    def get_line_text(self, fragments) -> str:
        return " ".join(f for f in fragments if f)

    def _clip(self, text: str, index: int) -> str:
        if len(text) <= self.max_page_chars:
            return text
        logger.warning("Page %d text truncated from %d to %d chars",
                       index + 1, len(text), self.max_page_chars)
        return text[:self.max_page_chars]
