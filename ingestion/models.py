"""Pydantic models for ingestion module."""
from pydantic import BaseModel, Field
from typing import List


class ExtractedPages(BaseModel):
    """Per-page plain text of an uploaded PDF."""
    total_pages: int
    page_texts: List[str] = Field(default_factory=list)
    used_page_markers: bool = True

    @property
    def has_text(self) -> bool:
        return bool(''.join(self.page_texts).strip())


class PageChunk(BaseModel):
    """Contiguous half-open page range [start, end) illustrated as one unit."""
    index: int
    start: int
    end: int

    @property
    def insert_after(self) -> int:
        """Page index after which this chunk's illustration is inserted."""
        return self.end - 1

    def text(self, page_texts: List[str], max_chars: int) -> str:
        """Concatenate this chunk's page texts, truncated to max_chars."""
        return ' '.join(page_texts[self.start:self.end])[:max_chars]
