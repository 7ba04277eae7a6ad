"""Budget-aware illustration pipeline."""
import time
from typing import Callable, List, Optional
from anthropic import Anthropic

from utils.logger import setup_logger
from ingestion.pdf_extractor import PDFExtractor, open_pdf
from ingestion.chunker import PageChunker
from ingestion.models import PageChunk
from generation.scene_describer import (
    SceneDescriber,
    ChatCompletionsSceneDescriber,
    AnthropicSceneDescriber
)
from generation.illustrator import Illustrator, CloudflareIllustrator
from generation.models import ScenePrompt, Illustration
from generation import prompts
from assembly.pdf_assembler import PDFAssembler
from execution.models import PipelineConfig, PipelineResult

logger = setup_logger(__name__)


def build_describer(cfg: PipelineConfig) -> SceneDescriber:
    """Factory: scene describer for the configured text-generation provider."""
    options = dict(
        max_tokens=cfg.scene_max_tokens,
        temperature=cfg.scene_temperature,
        max_prompt_chars=cfg.max_prompt_chars,
    )
    if cfg.text_gen_provider == "anthropic":
        client = Anthropic(api_key=cfg.anthropic_key, timeout=cfg.request_timeout_seconds)
        return AnthropicSceneDescriber(client, model=cfg.anthropic_model, owns_client=True, **options)
    return ChatCompletionsSceneDescriber(
        api_key=cfg.text_gen_key,
        endpoint=cfg.text_gen_endpoint,
        model=cfg.text_gen_model,
        timeout=cfg.request_timeout_seconds,
        **options
    )


def build_illustrator(cfg: PipelineConfig) -> Illustrator:
    return CloudflareIllustrator(
        api_token=cfg.image_gen_key,
        endpoint=cfg.image_gen_endpoint,
        jpeg_quality=cfg.jpeg_quality,
        timeout=cfg.request_timeout_seconds
    )


class IllustrationPipeline:
    """Extracts, chunks, describes, illustrates and reassembles one PDF."""

    def __init__(
        self,
        cfg: Optional[PipelineConfig] = None,
        describer: Optional[SceneDescriber] = None,
        illustrator: Optional[Illustrator] = None,
        extractor: Optional[PDFExtractor] = None,
        chunker: Optional[PageChunker] = None,
        assembler: Optional[PDFAssembler] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        self.cfg = cfg or PipelineConfig()
        # Initialize defaults if not provided
        self.describer = describer or build_describer(self.cfg)
        self.illustrator = illustrator or build_illustrator(self.cfg)
        self.extractor = extractor or PDFExtractor()
        self.chunker = chunker or PageChunker()
        self.assembler = assembler or PDFAssembler()
        self.clock = clock

        # Only services built here are closed here; injected ones belong to the caller
        self._owned = [
            service for service, injected in ((self.describer, describer), (self.illustrator, illustrator))
            if injected is None
        ]

    def close(self) -> None:
        """Close the HTTP clients of the default scene describer and illustrator."""
        for service in self._owned:
            service.close()
        self._owned = []

    def __enter__(self) -> "IllustrationPipeline":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def run(self, pdf_bytes: bytes) -> PipelineResult:
        """Produce the illustrated PDF for an uploaded document.

        Args:
            pdf_bytes: Uploaded PDF contents (not modified)

        Returns:
            PipelineResult; partially illustrated output is still a success

        Raises:
            InvalidPDFError: If the upload is empty or not a readable PDF
            NoExtractableTextError: If the PDF has no text layer
        """
        start = self.clock()
        deadline = start + self.cfg.budget_seconds

        doc = open_pdf(pdf_bytes)
        try:
            total_pages = doc.page_count
            logger.info(f"PDF loaded, total pages: {total_pages}")

            pages = self.extractor.extract(doc)
            chunks = self.chunker.chunk(total_pages)

            scene_prompts = self.describe_chunks(chunks, pages.page_texts)
            illustrations = self.illustrate_chunks(scene_prompts, deadline)

            assembly = self.assembler.assemble(doc, chunks, illustrations)
        finally:
            doc.close()

        elapsed = self.clock() - start
        budget_exhausted = any(i.status == "skipped_budget" for i in illustrations)
        logger.info(
            f"Pipeline finished in {elapsed:.1f}s: "
            f"{assembly.illustrations_inserted}/{len(chunks)} illustrations inserted"
        )

        return PipelineResult(
            pdf_bytes=assembly.pdf_bytes,
            total_pages=total_pages,
            chunks=chunks,
            prompts=scene_prompts,
            illustrations=illustrations,
            illustrations_inserted=assembly.illustrations_inserted,
            budget_exhausted=budget_exhausted,
            elapsed_seconds=elapsed
        )

    def describe_chunks(self, chunks: List[PageChunk], page_texts: List[str]) -> List[ScenePrompt]:
        """Describe every chunk; not subject to the budget cut-off."""
        scene_prompts = [
            self.describer.describe(chunk.text(page_texts, self.cfg.max_prompt_chars), chunk.index)
            for chunk in chunks
        ]
        logger.info(f"All {len(scene_prompts)} prompts generated")
        return scene_prompts

    def illustrate_chunks(self, scene_prompts: List[ScenePrompt], deadline: float) -> List[Illustration]:
        """Illustrate chunks in order until the deadline passes.

        The deadline is checked before each call; a call already in flight
        is allowed to finish. Result is index-aligned with scene_prompts.
        """
        illustrations = []

        for position, scene in enumerate(scene_prompts):
            if self.clock() > deadline:
                logger.warning(
                    f"Time budget of {self.cfg.budget_seconds:g}s exhausted: only attempted "
                    f"{position} of {len(scene_prompts)} images, skipping the rest"
                )
                illustrations.extend(
                    Illustration.skipped(s.chunk_index, "skipped_budget")
                    for s in scene_prompts[position:]
                )
                break

            if scene.is_empty:
                logger.info(f"Image {scene.chunk_index + 1} skipped: no scene prompt")
                illustrations.append(Illustration.skipped(scene.chunk_index, "skipped_no_prompt"))
                continue

            prompt = prompts.illustration_prompt(scene.text, self.cfg.style_suffix)
            illustration = self.illustrator.illustrate(prompt, scene.chunk_index)
            illustrations.append(illustration)
            logger.info(
                f"Image {scene.chunk_index + 1} generated: "
                f"{'OK' if illustration.available else 'FAIL'}"
            )

        return illustrations
