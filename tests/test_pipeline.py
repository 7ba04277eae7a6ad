"""Test the budget-aware illustration pipeline end to end with fake services."""
import fitz
import httpx
import pytest

from conftest import FakeClock, FakeDescriber, FakeIllustrator, make_image, make_pdf, page_texts_of
from execution.models import PipelineConfig
from execution.pipeline import IllustrationPipeline
from generation.scene_describer import ChatCompletionsSceneDescriber
from ingestion.pdf_extractor import InvalidPDFError, NoExtractableTextError

STYLE = "in a watercolor style."


def pipeline(describer=None, illustrator=None, clock=None, **cfg) -> IllustrationPipeline:
    cfg.setdefault("style_suffix", STYLE)
    return IllustrationPipeline(
        PipelineConfig(**cfg),
        describer=describer or FakeDescriber(),
        illustrator=illustrator or FakeIllustrator(),
        clock=clock or FakeClock()
    )


def test_fully_illustrated(eight_page_pdf):
    illustrator = FakeIllustrator()

    result = pipeline(illustrator=illustrator).run(eight_page_pdf)

    assert result.total_pages == 8
    assert [c.insert_after for c in result.chunks] == [2, 5, 7]
    assert result.illustrations_inserted == 3
    assert not result.budget_exhausted
    assert illustrator.prompts == [f"A lighthouse on a stormy cliff. {STYLE}"] * 3
    assert len(page_texts_of(result.pdf_bytes)) == result.output_page_count == 11


def test_budget_stops_further_image_calls(eight_page_pdf):
    """Test calls stop once the deadline passes; the rest are marked skipped."""
    clock = FakeClock()
    illustrator = FakeIllustrator(on_call=lambda: clock.advance(30))

    result = pipeline(illustrator=illustrator, clock=clock, budget_seconds=50).run(eight_page_pdf)

    # Checks happen at t=0 and t=30; at t=60 the 50s budget is spent
    assert len(illustrator.prompts) == 2
    assert [i.status for i in result.illustrations] == ["ok", "ok", "skipped_budget"]
    assert result.budget_exhausted
    assert result.illustrations_inserted == 2
    assert page_texts_of(result.pdf_bytes)[-2:] == ["Page 7 of the story", "Page 8 of the story"]


def test_describing_time_counts_toward_budget(eight_page_pdf):
    """Test a slow describe stage leaves no time for images, but still succeeds."""
    clock = FakeClock()

    class SlowDescriber(FakeDescriber):
        def _complete(self, system_prompt, user_prompt):
            clock.advance(20)
            return super()._complete(system_prompt, user_prompt)

    describer = SlowDescriber()
    illustrator = FakeIllustrator()

    result = pipeline(describer, illustrator, clock, budget_seconds=50).run(eight_page_pdf)

    assert len(describer.calls) == 3
    assert illustrator.prompts == []
    assert all(i.status == "skipped_budget" for i in result.illustrations)
    assert page_texts_of(result.pdf_bytes) == [f"Page {i + 1} of the story" for i in range(8)]


def test_all_image_failures_return_original_document(eight_page_pdf):
    illustrator = FakeIllustrator(fail=[0, 1, 2])

    result = pipeline(illustrator=illustrator).run(eight_page_pdf)

    assert result.illustrations_inserted == 0
    assert [i.status for i in result.illustrations] == ["failed"] * 3
    assert page_texts_of(result.pdf_bytes) == [f"Page {i + 1} of the story" for i in range(8)]


def test_page_count_matches_successful_illustrations(eight_page_pdf):
    result = pipeline(illustrator=FakeIllustrator(fail=[1])).run(eight_page_pdf)

    doc = fitz.open(stream=result.pdf_bytes, filetype="pdf")
    assert doc.page_count == result.total_pages + 2 == result.output_page_count
    doc.close()


def test_failed_scene_skips_illustration(eight_page_pdf):
    """Test an empty scene prompt means no image call for that chunk."""
    illustrator = FakeIllustrator()

    result = pipeline(FakeDescriber(reply=None), illustrator).run(eight_page_pdf)

    assert illustrator.prompts == []
    assert [p.source for p in result.prompts] == ["failed"] * 3
    assert [i.status for i in result.illustrations] == ["skipped_no_prompt"] * 3
    assert result.illustrations_inserted == 0


def test_empty_chunk_uses_fallback_scene():
    """Test a chunk with blank pages is illustrated from the fallback scene."""
    pdf = make_pdf(["Chapter one begins", "More text", "", ""])
    describer = FakeDescriber()
    illustrator = FakeIllustrator()

    result = pipeline(describer, illustrator).run(pdf)

    assert len(describer.calls) == 1
    assert result.prompts[1].text == "A detailed illustration for section 2."
    assert illustrator.prompts[1] == f"A detailed illustration for section 2. {STYLE}"


def test_rerun_is_stable(eight_page_pdf):
    """Test identical input gives identical page content and insertion points."""
    first = pipeline().run(eight_page_pdf)
    second = pipeline().run(eight_page_pdf)

    assert page_texts_of(first.pdf_bytes) == page_texts_of(second.pdf_bytes)
    assert [c.insert_after for c in first.chunks] == [c.insert_after for c in second.chunks]


@pytest.mark.parametrize("upload", [b"", b"GIF89a not a pdf at all", make_image("PNG")])
def test_invalid_upload_does_no_work(upload):
    describer = FakeDescriber()
    illustrator = FakeIllustrator()

    with pytest.raises(InvalidPDFError):
        pipeline(describer, illustrator).run(upload)

    assert describer.calls == []
    assert illustrator.prompts == []


def test_textless_pdf_raises_before_generation():
    describer = FakeDescriber()
    illustrator = FakeIllustrator()

    with pytest.raises(NoExtractableTextError):
        pipeline(describer, illustrator).run(make_pdf(["", "", ""]))

    assert describer.calls == []
    assert illustrator.prompts == []


def test_source_bytes_untouched(eight_page_pdf):
    original = bytes(eight_page_pdf)

    pipeline().run(eight_page_pdf)

    assert eight_page_pdf == original


def test_close_releases_default_http_clients():
    """Test clients the pipeline built itself are closed on exit."""
    with IllustrationPipeline(PipelineConfig(text_gen_provider="groq")) as built:
        describer_client = built.describer.client
        illustrator_client = built.illustrator.client
        assert not describer_client.is_closed

    assert describer_client.is_closed
    assert illustrator_client.is_closed


def test_close_leaves_injected_services_open():
    client = httpx.Client()
    describer = ChatCompletionsSceneDescriber(client=client)

    with IllustrationPipeline(PipelineConfig(), describer=describer, illustrator=FakeIllustrator()):
        pass

    assert not client.is_closed
    client.close()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
