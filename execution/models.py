"""Pydantic models for the illustration pipeline."""
from typing import List, Literal
from pydantic import BaseModel, Field

from ingestion.models import PageChunk
from generation.models import ScenePrompt, Illustration
import config


class PipelineConfig(BaseModel):
    """Explicit pipeline settings; defaults come from the environment."""
    text_gen_provider: Literal["groq", "anthropic"] = config.TEXT_GEN_PROVIDER
    text_gen_endpoint: str = config.GROQ_ENDPOINT
    text_gen_key: str = config.GROQ_API_KEY
    text_gen_model: str = config.GROQ_MODEL
    anthropic_key: str = config.ANTHROPIC_API_KEY
    anthropic_model: str = config.ANTHROPIC_MODEL
    image_gen_endpoint: str = config.IMAGE_GEN_ENDPOINT
    image_gen_key: str = config.CLOUDFLARE_API_TOKEN
    style_suffix: str = config.STYLE_SUFFIX
    budget_seconds: float = Field(default=config.BUDGET_SECONDS, gt=0)
    max_prompt_chars: int = Field(default=config.MAX_PROMPT_CHARS, gt=0)
    jpeg_quality: int = Field(default=config.JPEG_QUALITY, ge=1, le=95)
    scene_max_tokens: int = Field(default=config.SCENE_MAX_TOKENS, gt=0)
    scene_temperature: float = Field(default=config.SCENE_TEMPERATURE, ge=0, le=2)
    request_timeout_seconds: float = Field(default=config.REQUEST_TIMEOUT_SECONDS, gt=0)


class PipelineResult(BaseModel):
    pdf_bytes: bytes
    total_pages: int
    chunks: List[PageChunk]
    prompts: List[ScenePrompt]
    illustrations: List[Illustration]
    illustrations_inserted: int
    budget_exhausted: bool
    elapsed_seconds: float

    @property
    def output_page_count(self) -> int:
        return self.total_pages + self.illustrations_inserted
