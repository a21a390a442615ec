from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from wordsnake.common.types import Direction


class DirectionRequest(BaseModel):
    direction: Direction


class ActionResponse(BaseModel):
    accepted: bool
    phase: str


class PelletView(BaseModel):
    pos: Tuple[int, int]
    ch: str


class GuessView(BaseModel):
    word: str
    results: List[str]


class CountdownView(BaseModel):
    reason: str
    remaining: int


class GameSnapshot(BaseModel):
    session_id: str
    cols: int
    rows: int
    snake: List[Tuple[int, int]]
    direction: str
    pellets: List[PelletView]
    pending: List[str]
    guesses: List[GuessView]
    letter_hints: Dict[str, str] = Field(default_factory=dict)
    phase: str
    countdown: Optional[CountdownView] = None
    status: str
    crash_count: int
    max_crashes: Optional[int] = None
    max_snake_length: int
    guesses_left: int
    target: Optional[str] = None
    last_crash: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class BoardResponse(BaseModel):
    session_id: str
    board: List[str]


class SessionSummary(BaseModel):
    session_id: str
    phase: str
    guesses: int
    crash_count: int
