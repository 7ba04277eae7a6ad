"""Pydantic models for scene and illustration generation."""
from pydantic import BaseModel
from typing import Literal, Optional


class ScenePrompt(BaseModel):
    """Visual scene description for one chunk."""
    chunk_index: int
    text: str
    source: Literal["model", "fallback", "failed"]

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


IllustrationStatus = Literal["ok", "failed", "skipped_budget", "skipped_no_prompt"]


class Illustration(BaseModel):
    """Outcome of illustrating one chunk.

    `image` holds JPEG bytes only when status is "ok"; every other status is
    an explicit "unavailable" marker the assembler skips.
    """
    chunk_index: int
    status: IllustrationStatus
    image: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def available(self) -> bool:
        return self.status == "ok" and bool(self.image)

    @classmethod
    def ok(cls, chunk_index: int, image: bytes) -> "Illustration":
        return cls(chunk_index=chunk_index, status="ok", image=image)

    @classmethod
    def failed(cls, chunk_index: int, error: str) -> "Illustration":
        return cls(chunk_index=chunk_index, status="failed", error=error)

    @classmethod
    def skipped(
        cls,
        chunk_index: int,
        status: Literal["skipped_budget", "skipped_no_prompt"]
    ) -> "Illustration":
        return cls(chunk_index=chunk_index, status=status)
