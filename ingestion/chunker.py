"""Page-range chunking module."""
import math
from typing import List
from utils.logger import setup_logger
from ingestion.models import PageChunk

logger = setup_logger(__name__)


class PageChunker:
    """Partitions a document's pages into a logarithmic number of chunks."""

    def chunk(self, total_pages: int) -> List[PageChunk]:
        """Split [0, total_pages) into contiguous page ranges.

        Uses floor(log2(total_pages)) chunks so long documents get a handful
        of illustrations rather than one per page.

        Args:
            total_pages: Number of pages in the document

        Returns:
            Ordered, non-overlapping chunks covering every page

        Raises:
            ValueError: If total_pages is not positive
        """
        if total_pages < 1:
            raise ValueError(f"total_pages must be positive, got {total_pages}")

        if total_pages == 1:
            return [PageChunk(index=0, start=0, end=1)]

        # bit_length() - 1 == floor(log2(n)) without float rounding
        n_chunks = max(1, total_pages.bit_length() - 1)
        chunk_size = math.ceil(total_pages / n_chunks)

        chunks = []
        for i in range(n_chunks):
            start = i * chunk_size
            end = min((i + 1) * chunk_size, total_pages)
            if start < end:
                chunks.append(PageChunk(index=len(chunks), start=start, end=end))

        logger.info(
            f"Chunk ranges for {total_pages} pages: "
            f"{[(c.start, c.end) for c in chunks]}"
        )

        return chunks
