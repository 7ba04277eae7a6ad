"""Shared fixtures: in-memory PDFs, images and fake generation services."""
import io
from typing import Iterable, List, Optional
import fitz
import pytest
from PIL import Image

from generation.scene_describer import SceneDescriber
from generation.illustrator import Illustrator
from generation.models import Illustration


def make_pdf(page_texts: Iterable[str]) -> bytes:
    """Build a PDF with one page per entry; empty entries give blank pages."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


def make_image(fmt: str = "PNG", size=(64, 64), color=(200, 120, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


def page_texts_of(pdf_bytes: bytes) -> List[str]:
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    texts = [page.get_text().strip() for page in doc]
    doc.close()
    return texts


class FakeDescriber(SceneDescriber):
    """Returns a canned scene per call and counts model calls."""

    def __init__(self, reply: Optional[str] = "A lighthouse on a stormy cliff", **kwargs):
        super().__init__(**kwargs)
        self.reply = reply
        self.calls = []

    def _complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        self.calls.append(user_prompt)
        return self.reply


class FakeIllustrator(Illustrator):
    """Returns a fixed JPEG, or a failure for chunk indices listed in fail."""

    def __init__(self, image: Optional[bytes] = None, fail: Iterable[int] = (), on_call=None):
        self.image = image if image is not None else make_image("JPEG")
        self.fail = set(fail)
        self.on_call = on_call
        self.prompts = []

    def illustrate(self, prompt: str, chunk_index: int) -> Illustration:
        self.prompts.append(prompt)
        if self.on_call:
            self.on_call()
        if chunk_index in self.fail:
            return Illustration.failed(chunk_index, "HTTP 500")
        return Illustration.ok(chunk_index, self.image)


class FakeClock:
    """Monotonic clock advanced manually."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_image("JPEG")


@pytest.fixture
def png_bytes() -> bytes:
    return make_image("PNG")


@pytest.fixture
def eight_page_pdf() -> bytes:
    return make_pdf([f"Page {i + 1} of the story" for i in range(8)])
