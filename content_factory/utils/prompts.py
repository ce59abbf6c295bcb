from typing import Optional

from content_factory.utils.script_limits import (
    max_characters_for_duration,
    max_words_for_duration,
)

DEFAULT_MAX_SECONDS = 15
MAX_PROMPT_LENGTH = 1000
TRUNCATION_MARKER = "..."


def truncate_prompt(prompt: str, max_length: int = MAX_PROMPT_LENGTH) -> str:
    normalized = prompt.strip()
    if len(normalized) <= max_length:
        return normalized
    return f"{normalized[:max_length]}{TRUNCATION_MARKER}"


def build_voiceover_prompt(
    *,
    topic: str,
    style: str,
    script: Optional[str] = None,
    duration: Optional[int] = None,
) -> str:
    """Prompt text-to-video : consignes fixes + budgets de durée/mots/caractères."""
    max_seconds = duration or DEFAULT_MAX_SECONDS
    max_words = max_words_for_duration(max_seconds)
    max_characters = max_characters_for_duration(max_seconds)

    prompt = (
        "Create a voiceover script.\n"
        "\n"
        "STRICT RULES:\n"
        f"- Maximum duration: {max_seconds} seconds\n"
        f"- Maximum words: {max_words}\n"
        f"- Maximum characters (including spaces): {max_characters}\n"
        "- Do NOT exceed any limit.\n"
        "- If needed, shorten aggressively.\n"
        "\n"
        f"Style: {style}\n"
        f"Topic: {topic}\n"
    )
    if script:
        prompt += f"Base script: {script}\n"

    prompt += (
        "\n"
        "The voiceover must feel natural at normal speaking speed (150 WPM).\n"
        "Match video pacing to the voiceover timing.\n"
        "Avoid fast cuts.\n"
        "Return ONLY the final voiceover text.\n"
    )
    return truncate_prompt(prompt)
