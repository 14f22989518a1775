"""PDF text and metadata extraction.

Uses PyMuPDF (fitz). The indexer needs the page count, the embedded title and
the plain text of every page; the text feeds the metadata extractor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

import fitz  # PyMuPDF

from manualshelf.utils.text import normalize_whitespace

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class PdfContent:
    """Text and metadata read from a single PDF."""

    page_count: int
    title: str
    text: str


def iter_text_parts(doc: fitz.Document, path: Path) -> Iterator[str]:
    """Yield normalised text page by page."""
    for index in range(len(doc)):
        try:
            text = doc[index].get_text() or ""
        except Exception as exc:  # pragma: no cover - defensive path
            LOGGER.warning("Failed to read page %s in %s: %s", index, path, exc)
            continue
        normalized = normalize_whitespace(text.splitlines())
        if normalized:
            yield normalized


def load_pdf(path: Path) -> PdfContent:
    """Read page count, title and text of a PDF.

    An unreadable or corrupt PDF yields an empty record rather than aborting
    the run; only the hashing step is allowed to fail hard.
    """
    try:
        doc = fitz.open(path)
    except Exception as exc:
        LOGGER.error("Failed to open PDF %s: %s", path, exc)
        return PdfContent(page_count=0, title="", text="")

    try:
        metadata = doc.metadata or {}
        title = (metadata.get("title") or "").strip()
        text = "\n".join(iter_text_parts(doc, Path(path)))
        return PdfContent(page_count=len(doc), title=title, text=text)
    finally:
        doc.close()


def render_page_png(path: Path, page_number: int, *, scale: float = 1.5) -> bytes:
    """Render one 1-indexed page to PNG bytes."""
    doc = fitz.open(path)
    try:
        if page_number < 1 or page_number > len(doc):
            raise IndexError(f"Page {page_number} out of range for {path}")
        pixmap = doc[page_number - 1].get_pixmap(matrix=fitz.Matrix(scale, scale))
        return pixmap.tobytes("png")
    finally:
        doc.close()
