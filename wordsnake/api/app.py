from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from wordsnake.api.models import (
    ActionResponse,
    BoardResponse,
    DirectionRequest,
    GameSnapshot,
    SessionSummary,
)
from wordsnake.common.config import settings
from wordsnake.common.types import Direction, GameEvent
from wordsnake.engine.engine import GameController
from wordsnake.engine.scheduler import AsyncioScheduler
from wordsnake.engine.words import load_words

app = FastAPI(title="Word Snake")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger = logging.getLogger(__name__)

WEB_DIR = Path(__file__).resolve().parents[1] / "web"
SNAPSHOT_SEND_TIMEOUT = 1.0
WS_ACTIONS = {"pause", "resume", "toggle", "continue", "new"}

words: List[str] = []
controllers: Dict[str, GameController] = {}
engine_lock = asyncio.Lock()
tick_task: Optional[asyncio.Task] = None
# Monotonic seconds of the last request or subscriber activity per session
last_seen: Dict[str, float] = {}

# Snapshot subscribers by session id
subscribers: Dict[str, set[WebSocket]] = {}
subscribers_lock = asyncio.Lock()
last_frames: Dict[str, Dict[str, object]] = {}


@dataclass
class SessionBroadcaster:
    queue: asyncio.Queue[Dict[str, object]]
    task: asyncio.Task
    # Events raised since the last frame went out
    events: List[Dict[str, object]]


broadcasters: Dict[str, SessionBroadcaster] = {}


def _get_controller(session_id: str) -> GameController:
    controller = controllers.get(session_id)
    if controller is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown session")
    last_seen[session_id] = time.monotonic()
    return controller


def _action_response(controller: GameController, accepted: bool) -> ActionResponse:
    return ActionResponse(accepted=accepted, phase=controller.session.phase.value)


def _event_dict(event: GameEvent) -> Dict[str, object]:
    return asdict(event)


@app.on_event("startup")
async def _startup() -> None:
    global words, tick_task
    logging.getLogger("wordsnake").setLevel(settings.log_level.upper())
    words = load_words(settings.words_path)
    logger.info("Loaded %s words", len(words))
    if settings.enable_tick_loop:
        tick_task = asyncio.create_task(tick_loop())
    else:
        logger.warning("Tick loop disabled via WORDSNAKE_ENABLE_TICK_LOOP")


@app.on_event("shutdown")
async def _shutdown() -> None:
    global tick_task
    if tick_task is not None:
        tick_task.cancel()
        tick_task = None
    for broadcaster in list(broadcasters.values()):
        broadcaster.task.cancel()
    broadcasters.clear()
    for controller in controllers.values():
        controller.close()
    controllers.clear()
    last_seen.clear()


async def tick_loop() -> None:
    while True:
        async with subscribers_lock:
            session_broadcasters = dict(broadcasters)
        async with engine_lock:
            now = time.monotonic()
            for controller in list(controllers.values()):
                controller.tick(now * 1000)
            updates = {
                session_id: (
                    controllers[session_id].snapshot(),
                    controllers[session_id].drain_events(),
                )
                for session_id in session_broadcasters
                if session_id in controllers
            }
            _reap_idle_sessions(now)
        for session_id, broadcaster in session_broadcasters.items():
            update = updates.get(session_id)
            if not update:
                continue
            frame, events = update
            broadcaster.events.extend(_event_dict(event) for event in events)
            if last_frames.get(session_id) == frame and not events:
                continue
            last_frames[session_id] = frame
            _queue_latest(broadcaster.queue, {"type": "snapshot", **frame})
        await asyncio.sleep(settings.frame_seconds)


def _reap_idle_sessions(now: float) -> List[str]:
    """Drop sessions with no subscriber and no request for ``idle_session_seconds``.

    Caller must hold ``engine_lock``.
    """
    idle = settings.idle_session_seconds
    if idle <= 0:
        return []
    reaped = [
        session_id
        for session_id in controllers
        if not subscribers.get(session_id) and now - last_seen.get(session_id, now) >= idle
    ]
    for session_id in reaped:
        controllers.pop(session_id).close()
        last_seen.pop(session_id, None)
        last_frames.pop(session_id, None)
    if reaped:
        logger.info("Reaped %s idle sessions", len(reaped))
    return reaped


def _queue_latest(queue: asyncio.Queue[Dict[str, object]], frame: Dict[str, object]) -> None:
    try:
        queue.put_nowait(frame)
    except asyncio.QueueFull:
        try:
            queue.get_nowait()
        except asyncio.QueueEmpty:
            pass
        try:
            queue.put_nowait(frame)
        except asyncio.QueueFull:
            pass


async def _send_snapshot(ws: WebSocket, frame: Dict[str, object]) -> bool:
    try:
        await asyncio.wait_for(ws.send_json(frame), timeout=SNAPSHOT_SEND_TIMEOUT)
        return True
    except Exception:
        logger.exception("Failed to send snapshot")
        return False


async def _broadcast_session(
    session_id: str,
    queue: asyncio.Queue[Dict[str, object]],
    events: List[Dict[str, object]],
) -> None:
    while True:
        try:
            frame = await queue.get()
        except asyncio.CancelledError:
            break
        async with subscribers_lock:
            clients = list(subscribers.get(session_id, set()))
        if not clients:
            continue
        # Frames can be replaced in the queue, events are carried by whichever frame goes out
        frame = {**frame, "events": list(events)}
        events.clear()
        results = await asyncio.gather(
            *(_send_snapshot(ws, frame) for ws in clients),
            return_exceptions=True,
        )
        stale = [ws for ws, ok in zip(clients, results) if ok is not True]
        if stale:
            async with subscribers_lock:
                live_clients = subscribers.get(session_id)
                if live_clients:
                    for ws in stale:
                        live_clients.discard(ws)
                    if not live_clients:
                        _drop_broadcaster(session_id)


def _drop_broadcaster(session_id: str) -> None:
    subscribers.pop(session_id, None)
    last_frames.pop(session_id, None)
    broadcaster = broadcasters.pop(session_id, None)
    if broadcaster:
        broadcaster.task.cancel()


@app.post("/game", response_model=GameSnapshot)
async def create_game() -> GameSnapshot:
    async with engine_lock:
        _reap_idle_sessions(time.monotonic())
        if len(controllers) >= settings.max_sessions:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Too many sessions"
            )
        controller = GameController(
            AsyncioScheduler(),
            words=words,
            config=settings.game_config(),
            seed=settings.random_seed,
        )
        controllers[controller.session_id] = controller
        last_seen[controller.session_id] = time.monotonic()
        data = controller.snapshot()
    return GameSnapshot(**data)


@app.get("/game", response_model=List[SessionSummary])
async def list_games() -> List[SessionSummary]:
    async with engine_lock:
        return [
            SessionSummary(
                session_id=session_id,
                phase=controller.session.phase.value,
                guesses=len(controller.session.guesses),
                crash_count=controller.session.crash_count,
            )
            for session_id, controller in controllers.items()
        ]


@app.get("/game/{session_id}", response_model=GameSnapshot)
async def game_state(session_id: str) -> GameSnapshot:
    async with engine_lock:
        data = _get_controller(session_id).snapshot()
    return GameSnapshot(**data)


@app.get("/game/{session_id}/board", response_model=BoardResponse)
async def game_board(session_id: str) -> BoardResponse:
    async with engine_lock:
        board = _get_controller(session_id).render_board()
    return BoardResponse(session_id=session_id, board=["".join(row) for row in board])


@app.post("/game/{session_id}/new", response_model=GameSnapshot)
async def new_game(session_id: str) -> GameSnapshot:
    async with engine_lock:
        controller = _get_controller(session_id)
        controller.new_game()
        data = controller.snapshot()
    return GameSnapshot(**data)


@app.post("/game/{session_id}/direction", response_model=ActionResponse)
async def set_direction(session_id: str, req: DirectionRequest) -> ActionResponse:
    async with engine_lock:
        controller = _get_controller(session_id)
        accepted = controller.set_direction(req.direction)
        return _action_response(controller, accepted)


@app.post("/game/{session_id}/pause", response_model=ActionResponse)
async def pause_game(session_id: str) -> ActionResponse:
    async with engine_lock:
        controller = _get_controller(session_id)
        return _action_response(controller, controller.pause())


@app.post("/game/{session_id}/resume", response_model=ActionResponse)
async def resume_game(session_id: str) -> ActionResponse:
    async with engine_lock:
        controller = _get_controller(session_id)
        return _action_response(controller, controller.resume())


@app.post("/game/{session_id}/continue", response_model=ActionResponse)
async def continue_game(session_id: str) -> ActionResponse:
    async with engine_lock:
        controller = _get_controller(session_id)
        return _action_response(controller, controller.continue_play())


@app.delete("/game/{session_id}")
async def delete_game(session_id: str) -> Dict[str, str]:
    async with engine_lock:
        controller = controllers.pop(session_id, None)
        if controller is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown session")
        controller.close()
        last_seen.pop(session_id, None)
    async with subscribers_lock:
        _drop_broadcaster(session_id)
    return {"status": "ok"}


def _apply_ws_message(controller: GameController, message: str) -> bool:
    text = message.strip().lower()
    if text in WS_ACTIONS:
        if text == "pause":
            return controller.pause()
        if text == "resume":
            return controller.resume()
        if text == "toggle":
            return controller.toggle_pause()
        if text == "continue":
            return controller.continue_play()
        controller.new_game()
        return True
    return controller.set_direction(Direction(text))


@app.websocket("/game/{session_id}/ws")
async def game_ws(ws: WebSocket, session_id: str) -> None:
    if session_id not in controllers:
        await ws.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    await ws.accept()
    async with subscribers_lock:
        subscribers.setdefault(session_id, set()).add(ws)
        if session_id not in broadcasters:
            queue: asyncio.Queue[Dict[str, object]] = asyncio.Queue(maxsize=1)
            events: List[Dict[str, object]] = []
            task = asyncio.create_task(_broadcast_session(session_id, queue, events))
            broadcasters[session_id] = SessionBroadcaster(queue=queue, task=task, events=events)
    try:
        async with engine_lock:
            controller = controllers.get(session_id)
            frame = controller.snapshot() if controller else None
        if frame:
            await ws.send_json({"type": "snapshot", **frame})
        while True:
            try:
                message = await ws.receive_text()
            except WebSocketDisconnect:
                break
            except Exception:
                logger.exception("Game websocket receive failed")
                break
            async with engine_lock:
                controller = controllers.get(session_id)
                if controller is None:
                    break
                last_seen[session_id] = time.monotonic()
                try:
                    accepted = _apply_ws_message(controller, message)
                except ValueError:
                    reply: Dict[str, object] = {"type": "error", "detail": "Invalid intent"}
                else:
                    reply = {
                        "type": "ack",
                        "accepted": accepted,
                        "events": [_event_dict(e) for e in controller.drain_events()],
                    }
            await ws.send_json(reply)
    finally:
        if session_id in controllers:
            last_seen[session_id] = time.monotonic()
        async with subscribers_lock:
            clients = subscribers.get(session_id)
            if clients:
                clients.discard(ws)
                if not clients:
                    _drop_broadcaster(session_id)


@app.get("/")
def home() -> FileResponse:
    return FileResponse(WEB_DIR / "index.html")
