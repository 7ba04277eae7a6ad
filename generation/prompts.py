"""LLM prompt templates for scene descriptions."""

SCENE_SYSTEM_PROMPT = "You are an assistant that writes vivid, visual illustration prompts for books."


def scene_description_prompt(passage: str) -> str:
    """Generate prompt asking for a single drawable scene.

    Args:
        passage: Chunk text, already truncated

    Returns:
        Formatted prompt string
    """
    return f"""You are a visual scene generator for illustrated books.
Read the following passage and describe the most important visual scene that could be drawn as an illustration for a book. Write in 1-2 sentences, concrete and visual, no abstract or generic phrases. Directly describe the scene to be drawn, without any introductory words.

Passage:
\"\"\"{passage}\"\"\"
"""


def fallback_scene(chunk_index: int) -> str:
    """Scene used when a chunk has no text to summarize."""
    return f"A detailed illustration for section {chunk_index + 1}."


def illustration_prompt(scene: str, style_suffix: str) -> str:
    """Append the shared art-style suffix to a scene description."""
    return f"{scene.rstrip('.')}. {style_suffix}"
