"""
FastAPI entry point for the form coach backend.

Endpoints:
    GET  /health
    GET  /api/exercises
    WS   /ws/workout/{exercise_id}
        Streams pose frames from the client (33 × [x, y, z, visibility], or
        null when no person is detected) and answers each processed frame
        with feedback, score, phase and rep count.

Client messages:
    {"type": "start"}
    {"type": "stop"}
    {"type": "select", "exercise_id": "squat"}
    {"type": "frame", "landmarks": [[x, y, z, v], ...] | null}

Server messages:
    {"type": "frame", ...}          per processed frame
    {"type": "announcement", ...}   spoken cues, rep counts and periodic
                                    motivational lines while a workout runs
    {"type": "started" | "selected" | "saved" | "error", ...}

Run:
    cd <project_root>
    uvicorn src.pipelines.main:app --host 0.0.0.0 --port 8000 --reload
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Awaitable, Optional

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``src.*`` imports work when running
# with ``uvicorn src.pipelines.main:app`` from the project root.
# ---------------------------------------------------------------------------
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))

from src.exercises.catalog import get_all_exercises, get_exercise
from src.exercises.landmarks import frame_from_rows
from src.pipelines.config import DEFAULT_USER_ID, WORKOUT_STORE_DIR
from src.pipelines.session import WorkoutContext
from src.pipelines.stream import FrameStreamClosed, LatestFrame
from src.workout.announcer import Announcer, SpeakFn, random_motivational_message
from src.workout.recorder import WorkoutRecorder
from src.workout.store import JsonFileWorkoutStore, PersistenceError

logger = logging.getLogger("form_coach")
logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(name)s | %(message)s")


# ============================================================================
# Pydantic response models
# ============================================================================

class ExerciseInfo(BaseModel):
    id: str
    name: str
    target: int
    timed: bool


class ErrorResponse(BaseModel):
    error_code: str
    message: str


# ============================================================================
# App lifecycle
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Set up the workout store."""
    logger.info("Starting form coach backend …")
    app.state.store = JsonFileWorkoutStore(WORKOUT_STORE_DIR)
    logger.info("Workouts will be stored in %s", WORKOUT_STORE_DIR)
    yield
    logger.info("Shutting down.")


app = FastAPI(
    title="Form Coach API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# REST endpoints
# ============================================================================

@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/api/exercises", response_model=list[ExerciseInfo])
async def list_exercises():
    return [
        ExerciseInfo(id=ex.id, name=ex.name, target=ex.target, timed=ex.timed)
        for ex in get_all_exercises()
    ]


# ============================================================================
# Workout stream
# ============================================================================

async def _send_error(websocket: WebSocket, code: str, message: str) -> None:
    await websocket.send_json(
        {"type": "error", **ErrorResponse(error_code=code, message=message).model_dump()}
    )


def _new_announcer(speak: SpeakFn) -> Announcer:
    """Announcer for one stream, with the periodic motivational lines on."""
    return Announcer(speak, motivational_source=random_motivational_message)


async def _finish_session(websocket: WebSocket, saving: Awaitable[Optional[str]]) -> None:
    """Save the session without holding up frame processing."""
    try:
        workout_id = await saving
    except PersistenceError as exc:
        await _send_error(websocket, "SAVE_FAILED", str(exc))
        return
    await websocket.send_json({"type": "saved", "workout_id": workout_id})


async def _process_frames(
    websocket: WebSocket, context: WorkoutContext, slot: LatestFrame
) -> None:
    while True:
        try:
            frame = await slot.get()
        except FrameStreamClosed:
            return
        result = context.process_frame(frame)
        await websocket.send_json({"type": "frame", **result.model_dump(mode="json")})


async def _handle_message(
    websocket: WebSocket,
    context: WorkoutContext,
    slot: LatestFrame,
    message: dict,
    background: set,
) -> None:
    kind = message.get("type")

    if kind == "frame":
        rows = message.get("landmarks")
        if rows is None:
            slot.put(None)
            return
        try:
            slot.put(frame_from_rows(rows))
        except (TypeError, ValueError) as exc:
            await _send_error(websocket, "INVALID_FRAME", str(exc))

    elif kind == "start":
        context.start()
        await websocket.send_json({"type": "started", "exercise_id": context.exercise.id})

    elif kind == "stop":
        task = asyncio.create_task(_finish_session(websocket, context.halt()))
        background.add(task)
        task.add_done_callback(background.discard)

    elif kind == "select":
        try:
            exercise = context.select_exercise(str(message.get("exercise_id")))
        except ValueError as exc:
            await _send_error(websocket, "UNKNOWN_EXERCISE", str(exc))
            return
        except RuntimeError as exc:
            await _send_error(websocket, "WORKOUT_ACTIVE", str(exc))
            return
        await websocket.send_json({"type": "selected", "exercise_id": exercise.id})

    else:
        await _send_error(websocket, "INVALID_REQUEST", f"Unknown message type: {kind!r}")


@app.websocket("/ws/workout/{exercise_id}")
async def workout_stream(
    websocket: WebSocket,
    exercise_id: str,
    user_id: Optional[str] = None,
):
    await websocket.accept()

    try:
        exercise = get_exercise(exercise_id)
    except ValueError as exc:
        await _send_error(websocket, "UNKNOWN_EXERCISE", str(exc))
        await websocket.close(code=1008)
        return

    async def speak(text: str) -> None:
        await websocket.send_json({"type": "announcement", "message": text})

    recorder = WorkoutRecorder(user_id or DEFAULT_USER_ID, websocket.app.state.store)
    context = WorkoutContext(exercise, recorder, announcer=_new_announcer(speak))
    slot = LatestFrame()
    background: set = set()
    processor = asyncio.create_task(_process_frames(websocket, context, slot))

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except ValueError:
                await _send_error(websocket, "INVALID_REQUEST", "Message is not valid JSON.")
                continue
            if not isinstance(message, dict):
                await _send_error(websocket, "INVALID_REQUEST", "Expected a JSON object.")
                continue
            await _handle_message(websocket, context, slot, message, background)
    except WebSocketDisconnect:
        logger.info("Client disconnected from '%s' stream.", context.exercise.id)
    finally:
        slot.close()
        await asyncio.gather(processor, return_exceptions=True)
        if background:
            await asyncio.gather(*background, return_exceptions=True)
        if context.active:
            # Keep what was recorded even if the client vanished mid-set
            try:
                await context.stop()
            except PersistenceError as exc:
                logger.warning("Session lost on disconnect: %s", exc)
