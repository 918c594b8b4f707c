"""
Persistence collaborators for finished workouts.

The recorder only depends on the ``WorkoutStore`` protocol; any backend that
can save a ``WorkoutRecord`` and hand back an identifier will do.
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from src.utils.io_utils import new_document_id, save_json_document

from .state import WorkoutRecord

logger = logging.getLogger(__name__)


class PersistenceError(RuntimeError):
    """Raised when a finished workout could not be saved."""


@runtime_checkable
class WorkoutStore(Protocol):
    async def save_workout(self, record: WorkoutRecord) -> str:
        ...


class InMemoryWorkoutStore:
    """Keeps records in a dict. Used for tests and local demos."""

    def __init__(self):
        self.records: dict[str, WorkoutRecord] = {}

    async def save_workout(self, record: WorkoutRecord) -> str:
        workout_id = new_document_id()
        self.records[workout_id] = record
        return workout_id


class JsonFileWorkoutStore:
    """Writes one JSON document per workout into *directory*.

    File I/O runs in a worker thread so the event loop, and with it frame
    processing, is never blocked by a save.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    async def save_workout(self, record: WorkoutRecord) -> str:
        workout_id = new_document_id()
        payload = record.model_dump(mode="json")
        try:
            path = await asyncio.to_thread(
                save_json_document, str(self.directory), workout_id, payload
            )
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError(f"Could not save workout: {exc}") from exc
        logger.info("Workout %s saved to %s", workout_id, path)
        return workout_id
