"""PDF loading and per-page text extraction module."""
import math
import fitz  # PyMuPDF
from typing import List
from utils.logger import setup_logger
from ingestion.models import ExtractedPages

logger = setup_logger(__name__)

PAGE_SEPARATOR = '\f'


class InvalidPDFError(Exception):
    """Raised when the upload is missing, empty, or not a readable PDF."""
    pass


class NoExtractableTextError(Exception):
    """Raised when a PDF has no embedded text layer (likely a scanned image)."""
    pass


def open_pdf(pdf_bytes: bytes) -> fitz.Document:
    """Open raw PDF bytes as a PyMuPDF document.

    Args:
        pdf_bytes: Uploaded file contents

    Returns:
        Open fitz.Document (caller closes it)

    Raises:
        InvalidPDFError: If the bytes are empty, not a PDF, encrypted, or have no pages
    """
    if not pdf_bytes:
        raise InvalidPDFError("No file provided")

    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise InvalidPDFError(f"Failed to open PDF: {e}")

    # MuPDF opens raster images as one-page documents even when told "pdf"
    if not doc.is_pdf:
        doc.close()
        raise InvalidPDFError("Not a PDF file")

    if doc.needs_pass:
        doc.close()
        raise InvalidPDFError("PDF is password protected")

    if doc.page_count == 0:
        doc.close()
        raise InvalidPDFError("PDF has no pages")

    return doc


def split_page_texts(text: str, total_pages: int) -> List[str]:
    """Split a full-document text blob into exactly total_pages entries.

    Uses form-feed page separators when present. Otherwise falls back to
    spreading whitespace-delimited words evenly over the pages, which is an
    approximation and can misattribute text on irregular layouts.

    Args:
        text: Combined document text
        total_pages: Known page count (>= 1)

    Returns:
        List of page texts, length total_pages
    """
    if PAGE_SEPARATOR in text:
        pages = [segment.strip() for segment in text.split(PAGE_SEPARATOR)]
        if len(pages) > total_pages:
            # Surplus separators: keep the text, fold it into the last page
            tail = ' '.join(p for p in pages[total_pages - 1:] if p)
            pages = pages[:total_pages - 1] + [tail]
    else:
        words = text.split()
        words_per_page = math.ceil(len(words) / total_pages)
        pages = []
        if words_per_page:
            for i in range(0, len(words), words_per_page):
                pages.append(' '.join(words[i:i + words_per_page]))

    while len(pages) < total_pages:
        pages.append('')

    return pages


class PDFExtractor:
    """Extracts per-page text from uploaded PDFs."""

    def extract(self, doc: fitz.Document) -> ExtractedPages:
        """Extract one text entry per page.

        Args:
            doc: Open PDF document

        Returns:
            ExtractedPages with exactly doc.page_count entries

        Raises:
            NoExtractableTextError: If no page yields any text
        """
        total_pages = doc.page_count
        blob = self._full_text(doc)

        page_texts = split_page_texts(blob, total_pages)
        pages = ExtractedPages(
            total_pages=total_pages,
            page_texts=page_texts,
            used_page_markers=PAGE_SEPARATOR in blob
        )

        if not pages.has_text:
            raise NoExtractableTextError(
                "No extractable text found in PDF. "
                "This may be a scanned image PDF."
            )

        method = "page markers" if pages.used_page_markers else "word-count estimate"
        logger.info(
            f"Extracted text from {total_pages} pages by {method} "
            f"({len(blob.split())} words), first page: {page_texts[0][:60]!r}..."
        )

        return pages

    def _full_text(self, doc: fitz.Document) -> str:
        """Run full-document text extraction with form-feed page separators."""
        return PAGE_SEPARATOR.join(page.get_text() for page in doc)
