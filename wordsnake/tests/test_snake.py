import random

from wordsnake.common.config import GameConfig
from wordsnake.common.constants import WORD_LENGTH
from wordsnake.common.types import CrashKind, Direction, Phase
from wordsnake.engine.engine import GameController
from wordsnake.engine.grid import Grid
from wordsnake.engine.scheduler import ManualScheduler
from wordsnake.engine.snake import Snake

WORDS = [
    "APPLE", "BRAVE", "CRANE", "DELTA", "EAGLE",
    "FLAME", "GRAPE", "HOUSE", "IVORY", "JELLY",
]


def test_spawn_at_center_facing_right():
    snake = Snake.spawn(Grid(12, 16))
    assert snake.segments == [(6, 8)]
    assert snake.direction == Direction.RIGHT
    assert snake.queued is None


def test_reversal_rejected_when_longer_than_one():
    snake = Snake(segments=[(5, 5), (4, 5), (3, 5)])
    assert snake.queue_direction(Direction.LEFT) is False
    assert snake.queued is None
    assert snake.queue_direction(Direction.UP) is True
    assert snake.queued == Direction.UP


def test_reversal_allowed_for_single_segment():
    snake = Snake(segments=[(5, 5)])
    assert snake.queue_direction(Direction.LEFT) is True


def test_double_turn_within_one_step_is_blocked():
    snake = Snake(segments=[(5, 5), (4, 5), (3, 5)])
    assert snake.queue_direction(Direction.UP) is True
    # Still heading right until the next step, so LEFT would fold into segment 1
    assert snake.queue_direction(Direction.LEFT) is False
    assert snake.queued == Direction.UP


def test_collision_kinds():
    grid = Grid(12, 16)
    snake = Snake(segments=[(5, 5), (4, 5), (4, 6), (5, 6)])
    assert snake.collision((12, 5), grid) == CrashKind.WALL
    assert snake.collision((-1, 5), grid) == CrashKind.WALL
    assert snake.collision((5, 16), grid) == CrashKind.WALL
    assert snake.collision((5, 6), grid) == CrashKind.SELF
    assert snake.collision((6, 5), grid) is None


def test_advance_with_and_without_growth():
    snake = Snake(segments=[(5, 5), (4, 5)])
    snake.advance((6, 5), grow=False)
    assert snake.segments == [(6, 5), (5, 5)]
    snake.advance((7, 5), grow=True)
    assert snake.segments == [(7, 5), (6, 5), (5, 5)]


def _assert_simple_path(segments):
    assert len(set(segments)) == len(segments)
    for a, b in zip(segments, segments[1:]):
        assert abs(a[0] - b[0]) + abs(a[1] - b[1]) == 1


def test_random_walk_keeps_invariants():
    scheduler = ManualScheduler()
    controller = GameController(scheduler, words=WORDS, config=GameConfig(), seed=77)
    scheduler.advance(3)
    session = controller.session
    assert session.phase == Phase.RUNNING
    chooser = random.Random(5)

    for _ in range(400):
        snake = session.snake
        options = []
        for direction in Direction:
            dx, dy = direction.delta
            nxt = (snake.head[0] + dx, snake.head[1] + dy)
            if controller.grid.in_bounds(nxt) and nxt not in snake:
                options.append(direction)
        if not options:
            break
        assert controller.set_direction(chooser.choice(options)) is True
        before = len(snake)
        result = controller.step()
        assert result is not None
        assert result.crash is None
        if result.eaten:
            assert len(session.snake) == before + 1
        else:
            assert len(session.snake) == before
        _assert_simple_path(session.snake.segments)
        pellet_cells = [p.pos for p in session.pellets]
        assert len(set(pellet_cells)) == len(pellet_cells)
        assert not set(pellet_cells) & set(session.snake.segments)
        assert session.max_length >= len(session.snake)
        if session.phase.terminal:
            break
        k = len(session.pending)
        assert k < WORD_LENGTH
        assert any(p.ch == session.target[k] for p in session.pellets)
