from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from wordsnake.common.types import CrashKind, Direction, Position

if TYPE_CHECKING:
    from wordsnake.engine.grid import Grid

DEFAULT_DIRECTION = Direction.RIGHT


@dataclass
class Snake:
    """Head-first list of segments plus heading and a buffered turn."""

    segments: list[Position]
    direction: Direction = DEFAULT_DIRECTION
    queued: Direction | None = None

    @classmethod
    def spawn(cls, grid: Grid) -> Snake:
        return cls(segments=[grid.center()])

    @property
    def head(self) -> Position:
        return self.segments[0]

    def __len__(self) -> int:
        return len(self.segments)

    def __contains__(self, pos: object) -> bool:
        return pos in self.segments

    def __iter__(self):
        return iter(self.segments)

    def queue_direction(self, direction: Direction) -> bool:
        """Buffer a turn for the next step; refuse an instant reversal into segment 1."""
        if len(self.segments) > 1:
            dx, dy = direction.delta
            hx, hy = self.head
            if (hx + dx, hy + dy) == self.segments[1]:
                return False
        self.queued = direction
        return True

    def apply_queued(self) -> None:
        if self.queued is not None:
            self.direction = self.queued
            self.queued = None

    def next_head(self) -> Position:
        dx, dy = self.direction.delta
        hx, hy = self.head
        return (hx + dx, hy + dy)

    def collision(self, pos: Position, grid: Grid) -> CrashKind | None:
        if not grid.in_bounds(pos):
            return CrashKind.WALL
        if pos in self.segments:
            return CrashKind.SELF
        return None

    def advance(self, new_head: Position, grow: bool) -> None:
        self.segments.insert(0, new_head)
        if not grow:
            self.segments.pop()
