"""
Budgets de script calculés à partir d'une durée cible.

Fonctions pures : aucune I/O, aucun état.
"""

import math
from dataclasses import dataclass
from typing import Optional

WORDS_PER_SECOND = 3
MIN_WORDS = 10
AVG_CHARS_PER_WORD = 6


@dataclass(frozen=True)
class WordLimitResult:
    text: str
    was_trimmed: bool
    max_words: int
    word_count: int


def count_words(text: Optional[str]) -> int:
    return len((text or "").split())


def max_words_for_duration(duration_seconds: Optional[float]) -> int:
    """0 si la durée est absente ou <= 0, sinon max(10, floor(durée * 3))."""
    if not duration_seconds or duration_seconds <= 0:
        return 0
    return max(MIN_WORDS, math.floor(duration_seconds * WORDS_PER_SECOND))


def max_characters_for_duration(duration_seconds: Optional[float]) -> int:
    return max_words_for_duration(duration_seconds) * AVG_CHARS_PER_WORD


def enforce_word_limit(text: str, duration_seconds: Optional[float]) -> WordLimitResult:
    """
    Tronque `text` aux `max_words` premiers mots (séparés par un espace simple).
    Le texte est renvoyé tel quel (octet pour octet) s'il tient dans le budget
    ou si aucun budget ne s'applique.
    """
    max_words = max_words_for_duration(duration_seconds)
    words = text.split()
    word_count = len(words)

    if max_words == 0 or word_count <= max_words:
        return WordLimitResult(text=text, was_trimmed=False, max_words=max_words, word_count=word_count)

    return WordLimitResult(
        text=" ".join(words[:max_words]),
        was_trimmed=True,
        max_words=max_words,
        word_count=word_count,
    )
