"""Scene description generation using an LLM."""
import abc
from typing import Optional
import httpx
from anthropic import Anthropic, APIError

from utils.logger import setup_logger
from generation.models import ScenePrompt
from generation import prompts
import config

logger = setup_logger(__name__)


class SceneDescriber(abc.ABC):
    """Maps a chunk's text to a short visual scene description.

    Subclasses only implement the model call. Empty chunks get a fallback
    scene without any call, and failed calls produce an empty prompt
    instead of raising.
    """

    def __init__(
        self,
        max_tokens: int = config.SCENE_MAX_TOKENS,
        temperature: float = config.SCENE_TEMPERATURE,
        max_prompt_chars: int = config.MAX_PROMPT_CHARS
    ):
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_prompt_chars = max_prompt_chars

    def describe(self, text: str, chunk_index: int) -> ScenePrompt:
        """Describe the most important visual scene in a chunk.

        Args:
            text: Concatenated chunk text
            chunk_index: Zero-based chunk ordinal

        Returns:
            ScenePrompt; text is empty if the model call failed
        """
        if not text.strip():
            return ScenePrompt(
                chunk_index=chunk_index,
                text=prompts.fallback_scene(chunk_index),
                source="fallback"
            )

        passage = text[:self.max_prompt_chars]
        result = self._complete(
            prompts.SCENE_SYSTEM_PROMPT,
            prompts.scene_description_prompt(passage)
        )

        if result is None:
            return ScenePrompt(chunk_index=chunk_index, text="", source="failed")

        scene = result.strip()
        logger.info(f"Scene {chunk_index + 1} prompt: {scene}")
        return ScenePrompt(
            chunk_index=chunk_index,
            text=scene,
            source="model" if scene else "failed"
        )

    @abc.abstractmethod
    def _complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        """Run one completion; return None on any service failure."""
        pass

    def close(self) -> None:
        """Release network resources this describer created."""
        pass


class ChatCompletionsSceneDescriber(SceneDescriber):
    """Scene describer for OpenAI-compatible chat completion APIs (Groq by default)."""

    def __init__(
        self,
        api_key: str = config.GROQ_API_KEY,
        endpoint: str = config.GROQ_ENDPOINT,
        model: str = config.GROQ_MODEL,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        client: Optional[httpx.Client] = None,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.api_key = api_key
        self.endpoint = endpoint
        self.model = model
        self._owns_client = client is None
        self.client = client or httpx.Client(timeout=timeout)

        logger.info(f"Scene describer initialized with model: {model}")

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        try:
            response = self.client.post(
                self.endpoint,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt}
                    ],
                    "max_tokens": self.max_tokens,
                    "temperature": self.temperature,
                }
            )
        except httpx.HTTPError as e:
            logger.warning(f"Scene LLM request failed: {e}")
            return None

        if response.is_error:
            logger.warning(f"Scene LLM failed ({response.status_code}): {response.text[:200]}")
            return None

        try:
            return response.json()["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.warning(f"Unexpected scene LLM response: {e}")
            return None


class AnthropicSceneDescriber(SceneDescriber):
    """Scene describer backed by the Anthropic Messages API."""

    def __init__(
        self,
        anthropic_client: Anthropic,
        model: str = config.ANTHROPIC_MODEL,
        owns_client: bool = False,
        **kwargs
    ):
        super().__init__(**kwargs)
        self.client = anthropic_client
        self.model = model
        self._owns_client = owns_client

        logger.info(f"Scene describer initialized with model: {model}")

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def _complete(self, system_prompt: str, user_prompt: str) -> Optional[str]:
        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system_prompt,
                messages=[
                    {"role": "user", "content": user_prompt}
                ]
            )
        except APIError as e:
            logger.warning(f"Anthropic scene request failed: {e}")
            return None

        return ''.join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        )
