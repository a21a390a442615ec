from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from wordsnake.common.constants import FREE_CELL_ATTEMPTS
from wordsnake.common.types import Position
from wordsnake.engine.rng import Lcg32
from wordsnake.engine.state import Pellet

logger = logging.getLogger(__name__)

ORIGIN: Position = (0, 0)


@dataclass(frozen=True)
class Grid:
    """Fixed-size board; positions are (col, row)."""

    cols: int
    rows: int

    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.cols and 0 <= y < self.rows

    def center(self) -> Position:
        return (self.cols // 2, self.rows // 2)

    def cells(self) -> Iterator[Position]:
        for y in range(self.rows):
            for x in range(self.cols):
                yield (x, y)

    def is_free(
        self, pos: Position, snake: Iterable[Position], pellets: Iterable[Pellet]
    ) -> bool:
        if not self.in_bounds(pos):
            return False
        if pos in snake:
            return False
        return all(p.pos != pos for p in pellets)

    def random_free_cell(
        self,
        rng: Lcg32,
        snake: Iterable[Position],
        pellets: Iterable[Pellet],
        max_attempts: int = FREE_CELL_ATTEMPTS,
    ) -> Position:
        """Rejection-sample a free cell, falling back to the origin on a near-full board."""
        occupied = set(snake) | {p.pos for p in pellets}
        for _ in range(max_attempts):
            pos = (rng.randint(self.cols), rng.randint(self.rows))
            if pos not in occupied:
                return pos
        logger.debug("No free cell after %s attempts; using origin", max_attempts)
        return ORIGIN
