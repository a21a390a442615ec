from __future__ import annotations

import logging
from pathlib import Path

from wordsnake.common.constants import FALLBACK_WORD, MIN_WORD_LIST, WORD_LENGTH
from wordsnake.common.types import TargetSampling
from wordsnake.engine.rng import Lcg32

logger = logging.getLogger(__name__)

DEFAULT_WORDS_PATH = Path(__file__).resolve().parents[1] / "data" / "words.txt"


def normalize_words(lines: list[str]) -> list[str]:
    """Uppercase 5-letter alphabetic entries in file order; comments and junk are skipped."""
    words: list[str] = []
    for line in lines:
        word = line.split("#", 1)[0].strip().upper()
        if len(word) == WORD_LENGTH and word.isalpha() and word.isascii():
            words.append(word)
    return words


def load_words(path: str | Path | None = None) -> list[str]:
    """Read a word list; a missing file yields an empty list rather than an error."""
    source = Path(path) if path else DEFAULT_WORDS_PATH
    try:
        text = source.read_text(encoding="utf-8")
    except OSError:
        logger.warning("Word list %s could not be read", source)
        return []
    return normalize_words(text.splitlines())


def pick_target(
    words: list[str],
    rng: Lcg32,
    sampling: TargetSampling = TargetSampling.FULL,
) -> tuple[str, str | None]:
    """Return ``(target, warning)``; the warning is set when the fallback word was used."""
    if len(words) < MIN_WORD_LIST:
        warning = (
            f"Word list has {len(words)} usable words (need {MIN_WORD_LIST}); "
            f"using {FALLBACK_WORD}"
        )
        logger.warning(warning)
        return FALLBACK_WORD, warning
    if sampling == TargetSampling.FIRST_HALF:
        # Half-open range over len/2, so odd lists keep their middle word
        return words[int(rng.next() * (len(words) / 2))].upper(), None
    return words[rng.randint(len(words))].upper(), None
