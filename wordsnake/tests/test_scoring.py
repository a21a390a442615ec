import pytest

from wordsnake.common.types import LetterResult, Phase
from wordsnake.engine.scoring import commit, is_win, letter_hints, score_guess
from wordsnake.engine.snake import Snake
from wordsnake.engine.state import GuessRecord, Session
from wordsnake.engine.words import load_words

C = LetterResult.CORRECT
P = LetterResult.PRESENT
A = LetterResult.ABSENT


def _make_session(target: str = "APPLE") -> Session:
    return Session(session_id="s", target=target, snake=Snake(segments=[(6, 8)]))


def test_alloy_against_loyal():
    assert score_guess("ALLOY", "LOYAL") == [P, P, P, P, P]


def test_level_elves_masks_exact_matches_first():
    assert score_guess("ELVES", "LEVEL") == [P, P, C, C, A]


def test_repeated_letter_in_guess_only():
    # Only one P left after the exact match, so the second stray P is absent
    assert score_guess("PUPPY", "APPLE") == [P, A, C, A, A]
    assert score_guess("EERIE", "CRANE") == [A, A, P, A, C]


def test_repeated_letters_in_both():
    assert score_guess("BABES", "ABBEY") == [P, P, C, C, A]
    assert score_guess("LLAMA", "ALLOY") == [P, C, P, A, A]


def test_naive_membership_would_overcount():
    results = score_guess("PUPPY", "APPLE")
    naive = [C if g == t else P if g in "APPLE" else A for g, t in zip("PUPPY", "APPLE")]
    assert results != naive
    assert results.count(P) + results.count(C) == 2


def test_every_word_scores_itself_correct():
    for word in load_words():
        assert is_win(score_guess(word, word))


def test_length_mismatch_rejected():
    with pytest.raises(ValueError):
        score_guess("APPLES", "APPLE")


def test_commit_win_clears_buffer():
    session = _make_session()
    session.pending = list("APPLE")
    record = commit(session, max_guesses=6)
    assert record == GuessRecord(word="APPLE", results=(C, C, C, C, C))
    assert record.solved
    assert session.pending == []
    assert session.guesses == [record]
    assert session.phase == Phase.WON


def test_commit_miss_keeps_phase():
    session = _make_session()
    session.phase = Phase.RUNNING
    session.pending = list("XYZQW")
    record = commit(session, max_guesses=6)
    assert list(record.results) == [A, A, A, A, A]
    assert session.phase == Phase.RUNNING


def test_commit_exhausts_at_cap():
    session = _make_session()
    session.phase = Phase.RUNNING
    for _ in range(2):
        session.pending = list("XYZQW")
        commit(session, max_guesses=2)
    assert len(session.guesses) == 2
    assert session.phase == Phase.LOST_EXHAUSTED


def test_commit_requires_full_buffer():
    session = _make_session()
    session.pending = list("APP")
    with pytest.raises(ValueError):
        commit(session, max_guesses=6)


def test_letter_hints_keep_best_result():
    records = [
        GuessRecord(word="PUPPY", results=tuple(score_guess("PUPPY", "APPLE"))),
        GuessRecord(word="XYZQW", results=tuple(score_guess("XYZQW", "APPLE"))),
    ]
    hints = letter_hints(records)
    assert hints["P"] == C
    assert hints["U"] == A
    assert hints["X"] == A
