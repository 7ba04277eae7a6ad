"""Illustration generation and JPEG compression."""
import abc
import io
from typing import Optional
import httpx
from PIL import Image, UnidentifiedImageError

from utils.logger import setup_logger
from generation.models import Illustration
import config

logger = setup_logger(__name__)


def compress_to_jpeg(image_bytes: bytes, quality: int = config.JPEG_QUALITY) -> bytes:
    """Re-encode a raster image as JPEG at a fixed quality.

    Args:
        image_bytes: Encoded source image (PNG from the generator)
        quality: JPEG quality (1-95)

    Returns:
        JPEG bytes

    Raises:
        UnidentifiedImageError: If the bytes are not a decodable image
    """
    with Image.open(io.BytesIO(image_bytes)) as img:
        if img.mode != "RGB":
            img = img.convert("RGB")
        buffer = io.BytesIO()
        img.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()


class Illustrator(abc.ABC):
    """Turns a finished prompt into a compressed image, never raising."""

    @abc.abstractmethod
    def illustrate(self, prompt: str, chunk_index: int) -> Illustration:
        """Generate an illustration; failures come back as Illustration.failed."""
        pass

    def close(self) -> None:
        """Release network resources this illustrator created."""
        pass


class CloudflareIllustrator(Illustrator):
    """Illustrator for the Cloudflare Workers AI Stable Diffusion XL endpoint."""

    def __init__(
        self,
        api_token: str = config.CLOUDFLARE_API_TOKEN,
        endpoint: str = config.IMAGE_GEN_ENDPOINT,
        jpeg_quality: int = config.JPEG_QUALITY,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None
    ):
        self.api_token = api_token
        self.endpoint = endpoint
        self.jpeg_quality = jpeg_quality
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def illustrate(self, prompt: str, chunk_index: int) -> Illustration:
        label = f"Image {chunk_index + 1}"
        logger.info(f"Requesting {label.lower()}: \"{prompt[:80]}...\"")

        try:
            response = self.client.post(
                self.endpoint,
                headers={"Authorization": f"Bearer {self.api_token}"},
                json={"prompt": prompt}
            )
        except httpx.HTTPError as e:
            logger.warning(f"{label} request error: {e}")
            return Illustration.failed(chunk_index, f"transport error: {e}")

        logger.debug(
            f"{label} status: {response.status_code}, "
            f"content-type: {response.headers.get('content-type')}"
        )

        if response.is_error:
            logger.warning(f"{label} generation failed ({response.status_code}): {response.text[:200]}")
            return Illustration.failed(chunk_index, f"HTTP {response.status_code}")

        raw = response.content
        logger.info(f"{label} bytes before compression: {len(raw)}")

        try:
            jpeg = compress_to_jpeg(raw, self.jpeg_quality)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            logger.warning(f"{label} could not be decoded: {e}")
            return Illustration.failed(chunk_index, f"undecodable image: {e}")

        logger.info(f"{label} bytes after compression: {len(jpeg)}")
        return Illustration.ok(chunk_index, jpeg)
