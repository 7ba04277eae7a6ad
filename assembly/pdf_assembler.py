"""Rebuilds a PDF with illustration pages interleaved after their chunks."""
import fitz  # PyMuPDF
from typing import Dict, List
from pydantic import BaseModel

from utils.logger import setup_logger
from ingestion.models import PageChunk
from generation.models import Illustration

logger = setup_logger(__name__)

# US letter, in PDF points
PAGE_WIDTH = 612
PAGE_HEIGHT = 792

# Image box in PDF user space (origin bottom-left): x=56, y=150, 500x500
IMAGE_LEFT = 56
IMAGE_BOTTOM = 150
IMAGE_SIZE = 500


class AssemblyResult(BaseModel):
    pdf_bytes: bytes
    page_count: int
    illustrations_inserted: int
    failed_embeds: List[int]


def illustration_rect() -> fitz.Rect:
    """Image placement converted to PyMuPDF's top-left origin."""
    top = PAGE_HEIGHT - IMAGE_BOTTOM - IMAGE_SIZE
    return fitz.Rect(IMAGE_LEFT, top, IMAGE_LEFT + IMAGE_SIZE, top + IMAGE_SIZE)


class PDFAssembler:
    def assemble(
        self,
        source: fitz.Document,
        chunks: List[PageChunk],
        illustrations: List[Illustration]
    ) -> AssemblyResult:
        """Copy every original page in order, adding illustration pages.

        An illustration page follows the last page of its chunk. Unavailable
        illustrations and images that fail to embed are skipped.

        Args:
            source: Original document (read only)
            chunks: Ordered chunks
            illustrations: Index-aligned with chunks

        Returns:
            AssemblyResult with the serialized output document
        """
        by_insert_page: Dict[int, Illustration] = {
            chunk.insert_after: illustration
            for chunk, illustration in zip(chunks, illustrations)
        }

        output = fitz.open()
        inserted = 0
        failed_embeds = []

        try:
            for page_index in range(source.page_count):
                output.insert_pdf(source, from_page=page_index, to_page=page_index)

                illustration = by_insert_page.get(page_index)
                if illustration is None or not illustration.available:
                    continue

                if self._add_illustration_page(output, illustration.image, page_index):
                    inserted += 1
                else:
                    failed_embeds.append(illustration.chunk_index)

            pdf_bytes = output.tobytes(garbage=3, deflate=True)
            page_count = output.page_count
        finally:
            output.close()

        logger.info(
            f"PDF built: {page_count} pages ({inserted} illustrations), "
            f"{len(pdf_bytes)} bytes"
        )

        return AssemblyResult(
            pdf_bytes=pdf_bytes,
            page_count=page_count,
            illustrations_inserted=inserted,
            failed_embeds=failed_embeds
        )

    def _add_illustration_page(self, output: fitz.Document, image: bytes, page_index: int) -> bool:
        """Append a letter-size page with the image; False if embedding failed."""
        page = output.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        try:
            page.insert_image(illustration_rect(), stream=image, keep_proportion=False)
        except Exception as e:
            logger.warning(f"Failed to embed image after page {page_index + 1}: {e}")
            output.delete_page(page.number)
            return False

        logger.info(f"Embedded image after page {page_index + 1}")
        return True
