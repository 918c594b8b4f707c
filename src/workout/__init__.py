"""
Workout module: session recording, persistence and voice announcements.
"""

from .state import FeedbackEntry, WorkoutRecord, WorkoutSession
from .store import (
    InMemoryWorkoutStore,
    JsonFileWorkoutStore,
    PersistenceError,
    WorkoutStore,
)
from .recorder import WorkoutRecorder
from .announcer import MOTIVATIONAL_MESSAGES, Announcer, random_motivational_message

__all__ = [
    "FeedbackEntry",
    "WorkoutRecord",
    "WorkoutSession",
    "InMemoryWorkoutStore",
    "JsonFileWorkoutStore",
    "PersistenceError",
    "WorkoutStore",
    "WorkoutRecorder",
    "Announcer",
    "MOTIVATIONAL_MESSAGES",
    "random_motivational_message",
]
