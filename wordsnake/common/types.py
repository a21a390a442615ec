from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

Position = Tuple[int, int]


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def delta(self) -> Position:
        return DIRECTION_DELTA[self]

    @classmethod
    def parse(cls, value: "Direction | str") -> "Direction":
        if isinstance(value, Direction):
            return value
        return cls(value.strip().lower())


DIRECTION_DELTA = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


class LetterResult(str, Enum):
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"


class Phase(str, Enum):
    COUNTDOWN = "countdown"
    RUNNING = "running"
    PAUSED = "paused"
    AWAITING_CONTINUE = "awaiting_continue"
    WON = "won"
    LOST_EXHAUSTED = "lost_exhausted"
    LOST_MAX_CRASHES = "lost_max_crashes"

    @property
    def terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES = frozenset({Phase.WON, Phase.LOST_EXHAUSTED, Phase.LOST_MAX_CRASHES})


class CrashKind(str, Enum):
    WALL = "wall"
    SELF = "self"


class ResumeMode(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


class TargetSampling(str, Enum):
    FULL = "full"
    FIRST_HALF = "first_half"


@dataclass(frozen=True)
class GameEvent:
    kind: str
    message: str
    timestamp_ms: int
