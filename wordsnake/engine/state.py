from __future__ import annotations

from dataclasses import dataclass, field

from wordsnake.common.types import CrashKind, GameEvent, LetterResult, Phase, Position
from wordsnake.engine.snake import Snake


@dataclass(frozen=True)
class Pellet:
    pos: Position
    ch: str


@dataclass(frozen=True)
class GuessRecord:
    word: str
    results: tuple[LetterResult, ...]

    @property
    def solved(self) -> bool:
        return all(r == LetterResult.CORRECT for r in self.results)


@dataclass
class Countdown:
    reason: str  # "Starting in" | "Resuming in"
    remaining: int


@dataclass
class StepResult:
    head: Position
    crash: CrashKind | None = None
    eaten: str | None = None
    committed: GuessRecord | None = None


@dataclass
class Session:
    session_id: str
    target: str
    snake: Snake
    pellets: list[Pellet] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)
    guesses: list[GuessRecord] = field(default_factory=list)
    crash_count: int = 0
    max_length: int = 1
    phase: Phase = Phase.COUNTDOWN
    countdown: Countdown | None = None
    status: str = ""
    last_crash: CrashKind | None = None
    last_step_ms: float | None = None
    warnings: list[str] = field(default_factory=list)
    events: list[GameEvent] = field(default_factory=list)

    def pellet_at(self, pos: Position) -> Pellet | None:
        for pellet in self.pellets:
            if pellet.pos == pos:
                return pellet
        return None
