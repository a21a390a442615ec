from __future__ import annotations

import os
from dataclasses import dataclass, field

from wordsnake.common.constants import (
    COUNTDOWN_SECONDS,
    FREE_CELL_ATTEMPTS,
    GRID_COLS,
    GRID_ROWS,
    INITIAL_LETTERS,
    MAX_CRASHES,
    MAX_GUESSES,
    NEEDED_LETTER_BIAS,
    SPEED_MS,
)
from wordsnake.common.types import ResumeMode, TargetSampling


def _env_bool(value: str | None, default: bool = True) -> bool:
    if value is None:
        return default
    return value.strip().lower() not in {"0", "false", "no", "off"}


def _env_optional_int(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    return int(value)


def _parse_origins(value: str | None) -> list[str]:
    if not value:
        return [
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        ]
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass(frozen=True)
class GameConfig:
    """Rules for a single game session.

    ``max_crashes`` of ``None`` means crashes never end the game.
    """

    cols: int = GRID_COLS
    rows: int = GRID_ROWS
    speed_ms: int = SPEED_MS
    max_guesses: int = MAX_GUESSES
    max_crashes: int | None = MAX_CRASHES
    initial_letters: int = INITIAL_LETTERS
    needed_letter_bias: float = NEEDED_LETTER_BIAS
    countdown_seconds: int = COUNTDOWN_SECONDS
    resume_mode: ResumeMode = ResumeMode.AUTO
    target_sampling: TargetSampling = TargetSampling.FULL
    free_cell_attempts: int = FREE_CELL_ATTEMPTS


@dataclass(frozen=True)
class Settings:
    """Runtime settings loaded from environment variables."""

    grid_cols: int = int(os.getenv("WORDSNAKE_GRID_COLS", str(GRID_COLS)))
    grid_rows: int = int(os.getenv("WORDSNAKE_GRID_ROWS", str(GRID_ROWS)))
    speed_ms: int = int(os.getenv("WORDSNAKE_SPEED_MS", str(SPEED_MS)))
    max_guesses: int = int(os.getenv("WORDSNAKE_MAX_GUESSES", str(MAX_GUESSES)))
    # 0 disables the crash cap
    max_crashes: int = int(os.getenv("WORDSNAKE_MAX_CRASHES", str(MAX_CRASHES)))
    initial_letters: int = int(os.getenv("WORDSNAKE_INITIAL_LETTERS", str(INITIAL_LETTERS)))
    needed_letter_bias: float = float(
        os.getenv("WORDSNAKE_NEEDED_LETTER_BIAS", str(NEEDED_LETTER_BIAS))
    )
    countdown_seconds: int = int(os.getenv("WORDSNAKE_COUNTDOWN_SECONDS", str(COUNTDOWN_SECONDS)))
    resume_mode: str = os.getenv("WORDSNAKE_RESUME_MODE", ResumeMode.AUTO.value)
    target_sampling: str = os.getenv("WORDSNAKE_TARGET_SAMPLING", TargetSampling.FULL.value)
    words_path: str | None = os.getenv("WORDSNAKE_WORDS_PATH")
    random_seed: int | None = _env_optional_int(os.getenv("WORDSNAKE_RANDOM_SEED"))
    frame_seconds: float = float(os.getenv("WORDSNAKE_FRAME_SECONDS", "0.02"))
    max_sessions: int = int(os.getenv("WORDSNAKE_MAX_SESSIONS", "100"))
    # Sessions without a WebSocket subscriber are dropped after this long; 0 keeps them
    idle_session_seconds: float = float(os.getenv("WORDSNAKE_IDLE_SESSION_SECONDS", "300"))
    enable_tick_loop: bool = _env_bool(os.getenv("WORDSNAKE_ENABLE_TICK_LOOP", "1"))
    host: str = os.getenv("WORDSNAKE_HOST", "127.0.0.1")
    port: int = int(os.getenv("WORDSNAKE_PORT", "8000"))
    log_level: str = os.getenv("WORDSNAKE_LOG_LEVEL", "INFO")
    cors_origins: list[str] = field(
        default_factory=lambda: _parse_origins(os.getenv("WORDSNAKE_CORS_ORIGINS"))
    )

    def game_config(self) -> GameConfig:
        return GameConfig(
            cols=self.grid_cols,
            rows=self.grid_rows,
            speed_ms=self.speed_ms,
            max_guesses=self.max_guesses,
            max_crashes=self.max_crashes if self.max_crashes > 0 else None,
            initial_letters=self.initial_letters,
            needed_letter_bias=self.needed_letter_bias,
            countdown_seconds=self.countdown_seconds,
            resume_mode=ResumeMode(self.resume_mode.lower()),
            target_sampling=TargetSampling(self.target_sampling.lower()),
        )


settings = Settings()
