from __future__ import annotations

import logging
import time
import uuid

from wordsnake.common.config import GameConfig
from wordsnake.common.constants import WORD_LENGTH
from wordsnake.common.types import (
    CrashKind,
    Direction,
    GameEvent,
    Phase,
    ResumeMode,
)
from wordsnake.engine.grid import Grid
from wordsnake.engine.rng import Lcg32
from wordsnake.engine.scheduler import Scheduler, TimerHandle
from wordsnake.engine.scoring import commit, letter_hints
from wordsnake.engine.snake import Snake
from wordsnake.engine.spawner import ensure_next_correct_letter, spawn_letters
from wordsnake.engine.state import Countdown, GuessRecord, Pellet, Session, StepResult
from wordsnake.engine.words import load_words, pick_target

logger = logging.getLogger(__name__)

STARTING_IN = "Starting in"
RESUMING_IN = "Resuming in"
COUNTDOWN_INTERVAL_SECONDS = 1.0
MAX_EVENTS = 50


class GameController:
    """Owns a single game session; every mutation goes through these methods.

    ``tick`` is the frame driver, countdowns run on ``scheduler``. Both must be
    called from the same thread.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        words: list[str] | None = None,
        config: GameConfig | None = None,
        seed: int | None = None,
        session_id: str | None = None,
    ) -> None:
        self.scheduler = scheduler
        self.config = config or GameConfig()
        self.grid = Grid(self.config.cols, self.config.rows)
        self.words = list(words) if words is not None else load_words()
        if seed is None:
            seed = int(time.time() * 1000) & 0xFFFFFFFF
        self.rng = Lcg32(seed)
        self.session_id = session_id or str(uuid.uuid4())
        self._countdown_handle: TimerHandle | None = None
        self._countdown_token = 0
        self.session: Session
        self.new_game()

    # Lifecycle

    def new_game(self) -> Session:
        """Discard the current session and start a new one behind the start countdown."""
        self._cancel_countdown()
        self.session = self._fresh_session()
        session = self.session
        spawn_letters(
            self.config.initial_letters,
            session,
            self.grid,
            self.rng,
            self.config.needed_letter_bias,
            self.config.free_cell_attempts,
        )
        self._ensure_letter()
        for warning in session.warnings:
            self._emit("warning", warning)
        self._emit("new_game", "New game started.")
        logger.info("Session %s started (%s pellets)", self.session_id, len(session.pellets))
        self._start_countdown(STARTING_IN)
        return session

    def pause(self) -> bool:
        session = self.session
        if session.phase != Phase.RUNNING:
            return False
        session.phase = Phase.PAUSED
        session.status = "Paused."
        return True

    def resume(self) -> bool:
        session = self.session
        if session.phase != Phase.PAUSED:
            return False
        self._enter_running()
        return True

    def toggle_pause(self) -> bool:
        if self.session.phase == Phase.PAUSED:
            return self.resume()
        return self.pause()

    def continue_play(self) -> bool:
        """Leave the post-crash hold used in manual resume mode."""
        if self.session.phase != Phase.AWAITING_CONTINUE:
            return False
        self._start_countdown(RESUMING_IN)
        return True

    def close(self) -> None:
        """Stop any running countdown; the controller is not used afterwards."""
        self._cancel_countdown()
        logger.info("Session %s closed", self.session_id)

    # Input

    def set_direction(self, intent: Direction | str) -> bool:
        """Queue a turn for the next step. Raises ``ValueError`` on an unknown intent."""
        direction = Direction.parse(intent)
        if self.session.phase.terminal:
            return False
        return self.session.snake.queue_direction(direction)

    # Simulation

    def tick(self, now_ms: float) -> StepResult | None:
        """Frame driver: step once ``speed_ms`` has elapsed since the previous step."""
        session = self.session
        if session.phase != Phase.RUNNING:
            return None
        if session.last_step_ms is None:
            session.last_step_ms = now_ms
            return None
        if now_ms - session.last_step_ms < self.config.speed_ms:
            return None
        session.last_step_ms = now_ms
        return self.step()

    def step(self) -> StepResult | None:
        """Advance the snake one cell. No-op outside the running phase."""
        session = self.session
        if session.phase != Phase.RUNNING:
            return None
        snake = session.snake
        snake.apply_queued()
        head = snake.next_head()
        crash = snake.collision(head, self.grid)
        if crash is not None:
            self._crash(crash)
            return StepResult(head=head, crash=crash)

        pellet = session.pellet_at(head)
        snake.advance(head, grow=pellet is not None)
        result = StepResult(head=head)
        if pellet is not None:
            session.pellets.remove(pellet)
            session.pending.append(pellet.ch)
            result.eaten = pellet.ch
            spawn_letters(
                1,
                session,
                self.grid,
                self.rng,
                self.config.needed_letter_bias,
                self.config.free_cell_attempts,
            )
            self._ensure_letter()
            if len(session.pending) == WORD_LENGTH:
                result.committed = self._commit_guess()
        session.max_length = max(session.max_length, len(snake))
        return result

    # Render sink

    def snapshot(self) -> dict:
        """Read-only view of the session for renderers."""
        session = self.session
        cap = self.config.max_crashes
        return {
            "session_id": self.session_id,
            "cols": self.grid.cols,
            "rows": self.grid.rows,
            "snake": [list(pos) for pos in session.snake.segments],
            "direction": session.snake.direction.value,
            "pellets": [{"pos": list(p.pos), "ch": p.ch} for p in session.pellets],
            "pending": list(session.pending),
            "guesses": [
                {"word": g.word, "results": [r.value for r in g.results]}
                for g in session.guesses
            ],
            "letter_hints": {ch: r.value for ch, r in letter_hints(session.guesses).items()},
            "phase": session.phase.value,
            "countdown": (
                {"reason": session.countdown.reason, "remaining": session.countdown.remaining}
                if session.countdown
                else None
            ),
            "status": session.status,
            "crash_count": session.crash_count,
            "max_crashes": cap,
            "max_snake_length": session.max_length,
            "guesses_left": self.config.max_guesses - len(session.guesses),
            "target": session.target if session.phase.terminal else None,
            "last_crash": session.last_crash.value if session.last_crash else None,
            "warnings": list(session.warnings),
        }

    def render_board(self) -> list[list[str]]:
        return render_board(self.session, self.grid)

    def drain_events(self) -> list[GameEvent]:
        """Return and clear the event log; only the newest ``MAX_EVENTS`` survive between drains."""
        events = self.session.events
        self.session.events = []
        return events

    # Internal helpers

    def _fresh_session(self) -> Session:
        target, warning = pick_target(self.words, self.rng, self.config.target_sampling)
        session = Session(
            session_id=self.session_id,
            target=target,
            snake=Snake.spawn(self.grid),
        )
        if warning:
            session.warnings.append(warning)
        return session

    def _ensure_letter(self) -> Pellet | None:
        return ensure_next_correct_letter(
            self.session, self.grid, self.rng, self.config.free_cell_attempts
        )

    def _commit_guess(self) -> GuessRecord:
        session = self.session
        record = commit(session, self.config.max_guesses)
        crashes = session.crash_count
        self._emit("guess", f"{record.word}: {' '.join(r.value for r in record.results)}")
        logger.info(
            "Session %s guess %s/%s: %s",
            self.session_id,
            len(session.guesses),
            self.config.max_guesses,
            record.word,
        )
        if session.phase == Phase.WON:
            session.status = f"You solved it! Crashes: {crashes}"
            self._emit("won", session.status)
            logger.info("Session %s won in %s guesses", self.session_id, len(session.guesses))
        elif session.phase == Phase.LOST_EXHAUSTED:
            session.status = f"Out of guesses. Word: {session.target}. Crashes: {crashes}"
            self._emit("lost", session.status)
            logger.info("Session %s out of guesses", self.session_id)
        else:
            session.status = "Keep going."
            self._ensure_letter()
        return record

    def _crash(self, kind: CrashKind) -> None:
        session = self.session
        session.crash_count += 1
        session.last_crash = kind
        self._emit("crash", f"{kind.value.capitalize()} crash ({session.crash_count}).")
        logger.info("Session %s %s crash #%s", self.session_id, kind.value, session.crash_count)
        cap = self.config.max_crashes
        if cap is not None and session.crash_count >= cap:
            self._cancel_countdown()
            session.phase = Phase.LOST_MAX_CRASHES
            session.status = f"Too many crashes ({session.crash_count}). Word: {session.target}."
            self._emit("lost", session.status)
            return
        session.snake = Snake.spawn(self.grid)
        self._relocate_pellets_under_snake()
        self._ensure_letter()
        if self.config.resume_mode == ResumeMode.MANUAL:
            session.phase = Phase.AWAITING_CONTINUE
            session.status = f"Crash ({session.crash_count}). Press Continue to resume."
            return
        self._start_countdown(RESUMING_IN)

    def _relocate_pellets_under_snake(self) -> None:
        session = self.session
        covered = [p for p in session.pellets if p.pos in session.snake]
        for pellet in covered:
            session.pellets.remove(pellet)
            pos = self.grid.random_free_cell(
                self.rng, session.snake, session.pellets, self.config.free_cell_attempts
            )
            session.pellets.append(Pellet(pos=pos, ch=pellet.ch))

    def _start_countdown(self, reason: str) -> None:
        self._cancel_countdown()
        session = self.session
        session.phase = Phase.COUNTDOWN
        session.countdown = Countdown(reason=reason, remaining=self.config.countdown_seconds)
        self._countdown_token += 1
        if session.countdown.remaining <= 0:
            self._finish_countdown()
            return
        session.status = f"{reason} {session.countdown.remaining}"
        self._schedule_countdown(self._countdown_token)

    def _schedule_countdown(self, token: int) -> None:
        self._countdown_handle = self.scheduler.call_later(
            COUNTDOWN_INTERVAL_SECONDS, lambda: self._countdown_tick(token)
        )

    def _countdown_tick(self, token: int) -> None:
        # A newer countdown or new game invalidates this callback
        if token != self._countdown_token:
            return
        session = self.session
        if session.phase != Phase.COUNTDOWN or session.countdown is None:
            return
        session.countdown.remaining -= 1
        if session.countdown.remaining <= 0:
            self._finish_countdown()
            return
        session.status = f"{session.countdown.reason} {session.countdown.remaining}"
        self._schedule_countdown(token)

    def _finish_countdown(self) -> None:
        self._countdown_handle = None
        self.session.countdown = None
        if self.session.phase.terminal:
            return
        self._enter_running()

    def _cancel_countdown(self) -> None:
        if self._countdown_handle is not None:
            self._countdown_handle.cancel()
            self._countdown_handle = None
        self._countdown_token += 1

    def _enter_running(self) -> None:
        session = self.session
        session.phase = Phase.RUNNING
        session.last_step_ms = None
        session.status = "Keep going." if session.guesses else "Collect letters to form a guess."

    def _emit(self, kind: str, message: str) -> None:
        events = self.session.events
        events.append(GameEvent(kind=kind, message=message, timestamp_ms=int(time.time() * 1000)))
        if len(events) > MAX_EVENTS:
            del events[: len(events) - MAX_EVENTS]


def render_board(session: Session, grid: Grid) -> list[list[str]]:
    """ASCII board: ``H`` head, ``S`` body, pellet letters, ``.`` empty."""
    board = [["." for _ in range(grid.cols)] for _ in range(grid.rows)]
    for pellet in session.pellets:
        x, y = pellet.pos
        board[y][x] = pellet.ch
    for idx, (x, y) in enumerate(session.snake.segments):
        if grid.in_bounds((x, y)):
            board[y][x] = "H" if idx == 0 else "S"
    return board
