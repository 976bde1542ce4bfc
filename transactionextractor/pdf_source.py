# -*- coding: utf-8 -*-
"""pdf_source.py
Glyph acquisition from rendered PDFs.

The engine never reads PDF byte structure itself; it asks a *glyph source*
for the positioned text of each page, one page at a time and in ascending
page order.  Two sources are provided:

  • ``PdfPlumberGlyphSource``: words from ``page.extract_words`` with blank
    characters kept, so a table cell stays a single fragment.
  • ``PyMuPDFGlyphSource``: text spans from ``page.get_text('dict')``.

Both report *y* measured from the bottom of the page (larger = higher up),
which is the convention the row reconstructor expects.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List

import fitz  # PyMuPDF
import pdfplumber

from .errors import DocumentReadError, ProtectedDocumentError
from .glyphs import Glyph

logger = logging.getLogger(__name__)


@dataclass
class PageGlyphs:
    number: int
    total: int
    glyphs: List[Glyph]


def _looks_protected(exc: Exception) -> bool:
    text = f"{type(exc).__name__} {exc}".lower()
    return "password" in text or "encrypt" in text


class PdfPlumberGlyphSource:
    """Word-level glyphs via pdfplumber."""

    name = "pdfplumber"

    def __init__(self, source, x_tolerance: float = 3, y_tolerance: float = 3):
        self.source = source
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    def iter_pages(self) -> Iterator[PageGlyphs]:
        try:
            pdf = pdfplumber.open(self.source)
        except Exception as e:
            if _looks_protected(e):
                raise ProtectedDocumentError("This PDF is password protected") from e
            raise DocumentReadError(f"Could not open PDF: {e}") from e

        with pdf:
            try:
                pages = pdf.pages
            except Exception as e:
                if _looks_protected(e):
                    raise ProtectedDocumentError("This PDF is password protected") from e
                raise DocumentReadError(f"Could not read PDF pages: {e}") from e
            total = len(pages)
            for number, page in enumerate(pages, start=1):
                try:
                    words = page.extract_words(
                        keep_blank_chars=True,
                        x_tolerance=self.x_tolerance,
                        y_tolerance=self.y_tolerance,
                    )
                except Exception as e:
                    raise DocumentReadError(f"Failed to read page {number}: {e}") from e

                height = float(page.height)
                glyphs = [
                    Glyph(
                        text=w["text"],
                        x=round(float(w["x0"])),
                        y=round(height - float(w["bottom"])),
                        page=number,
                    )
                    for w in words
                    if w["text"].strip()
                ]
                logger.info(f"Page {number}/{total}: {len(glyphs)} glyphs")
                yield PageGlyphs(number, total, glyphs)


class PyMuPDFGlyphSource:
    """Span-level glyphs via PyMuPDF."""

    name = "pymupdf"

    def __init__(self, source):
        self.source = source

    def _open(self):
        if isinstance(self.source, (bytes, bytearray)):
            return fitz.open(stream=bytes(self.source), filetype="pdf")
        return fitz.open(self.source)

    def iter_pages(self) -> Iterator[PageGlyphs]:
        try:
            doc = self._open()
        except Exception as e:
            raise DocumentReadError(f"Could not open PDF: {e}") from e

        with doc:
            if doc.needs_pass:
                raise ProtectedDocumentError("This PDF is password protected")
            total = doc.page_count
            for index in range(total):
                number = index + 1
                try:
                    page = doc.load_page(index)
                    layout = page.get_text("dict")
                except Exception as e:
                    raise DocumentReadError(f"Failed to read page {number}: {e}") from e

                height = float(page.rect.height)
                glyphs: List[Glyph] = []
                for block in layout.get("blocks", []):
                    for line in block.get("lines", []):
                        for span in line.get("spans", []):
                            text = span.get("text", "")
                            if not text.strip():
                                continue
                            x0, _y0, _x1, y1 = span["bbox"]
                            glyphs.append(Glyph(text=text, x=round(x0), y=round(height - y1), page=number))
                logger.info(f"Page {number}/{total}: {len(glyphs)} glyphs")
                yield PageGlyphs(number, total, glyphs)


GLYPH_SOURCES = {
    PdfPlumberGlyphSource.name: PdfPlumberGlyphSource,
    PyMuPDFGlyphSource.name: PyMuPDFGlyphSource,
}


def open_glyph_source(source, backend: str = "pdfplumber"):
    try:
        factory = GLYPH_SOURCES[backend]
    except KeyError:
        raise ValueError(f"Unknown PDF backend '{backend}' (choose from {', '.join(GLYPH_SOURCES)})")
    return factory(source)
