from __future__ import annotations

from wordsnake.common.constants import ALPHABET, FREE_CELL_ATTEMPTS, WORD_LENGTH
from wordsnake.engine.grid import Grid
from wordsnake.engine.rng import Lcg32
from wordsnake.engine.state import Pellet, Session


def needed_letters(target: str, pending: list[str]) -> list[str]:
    """Target letters not yet collected, keeping repeats."""
    return [ch for ch in target if ch not in pending]


def choose_letter(rng: Lcg32, target: str, pending: list[str], bias: float) -> str:
    needed = needed_letters(target, pending)
    if rng.next() < bias and needed:
        return rng.choice(needed)
    return rng.choice(ALPHABET)


def spawn_letters(
    n: int,
    session: Session,
    grid: Grid,
    rng: Lcg32,
    bias: float,
    max_attempts: int = FREE_CELL_ATTEMPTS,
) -> list[Pellet]:
    """Drop ``n`` pellets on free cells, biased toward letters the guess still needs."""
    spawned: list[Pellet] = []
    for _ in range(n):
        pos = grid.random_free_cell(rng, session.snake, session.pellets, max_attempts)
        ch = choose_letter(rng, session.target, session.pending, bias)
        pellet = Pellet(pos=pos, ch=ch)
        session.pellets.append(pellet)
        spawned.append(pellet)
    return spawned


def ensure_next_correct_letter(
    session: Session,
    grid: Grid,
    rng: Lcg32,
    max_attempts: int = FREE_CELL_ATTEMPTS,
) -> Pellet | None:
    """Force-spawn ``target[k]`` when the board lacks it, k being the buffer length."""
    k = len(session.pending)
    if k >= WORD_LENGTH:
        return None
    wanted = session.target[k]
    if any(p.ch == wanted for p in session.pellets):
        return None
    pos = grid.random_free_cell(rng, session.snake, session.pellets, max_attempts)
    pellet = Pellet(pos=pos, ch=wanted)
    session.pellets.append(pellet)
    return pellet
