"""Wordle-style scoring and guess commitment."""

from __future__ import annotations

from wordsnake.common.constants import WORD_LENGTH
from wordsnake.common.types import LetterResult, Phase
from wordsnake.engine.state import GuessRecord, Session

_HINT_RANK = {LetterResult.ABSENT: 0, LetterResult.PRESENT: 1, LetterResult.CORRECT: 2}


def score_guess(guess: str, target: str) -> list[LetterResult]:
    """Score ``guess`` against ``target`` with two-pass masking.

    Exact matches are consumed first so a letter that appears once in the
    target is never credited twice.
    """
    if len(guess) != len(target):
        raise ValueError("Guess and target must have the same length")
    results = [LetterResult.ABSENT] * len(guess)
    remaining_target: list[str | None] = list(target)
    remaining_guess: list[str | None] = list(guess)
    for i, (g, t) in enumerate(zip(guess, target)):
        if g == t:
            results[i] = LetterResult.CORRECT
            remaining_target[i] = None
            remaining_guess[i] = None
    for i, g in enumerate(remaining_guess):
        if g is None:
            continue
        if g in remaining_target:
            results[i] = LetterResult.PRESENT
            remaining_target[remaining_target.index(g)] = None
    return results


def is_win(results: list[LetterResult] | tuple[LetterResult, ...]) -> bool:
    return all(r == LetterResult.CORRECT for r in results)


def commit(session: Session, max_guesses: int) -> GuessRecord:
    """Turn the full pending buffer into a guess record and latch win/exhaustion."""
    if len(session.pending) != WORD_LENGTH:
        raise ValueError(f"Pending buffer must hold {WORD_LENGTH} letters")
    word = "".join(session.pending)
    record = GuessRecord(word=word, results=tuple(score_guess(word, session.target)))
    session.guesses.append(record)
    session.pending = []
    if record.solved:
        session.phase = Phase.WON
    elif len(session.guesses) >= max_guesses:
        session.phase = Phase.LOST_EXHAUSTED
    return record


def letter_hints(records: list[GuessRecord]) -> dict[str, LetterResult]:
    """Best-known result per letter across all guesses (correct > present > absent)."""
    hints: dict[str, LetterResult] = {}
    for record in records:
        for ch, result in zip(record.word, record.results):
            current = hints.get(ch)
            if current is None or _HINT_RANK[result] > _HINT_RANK[current]:
                hints[ch] = result
    return hints
