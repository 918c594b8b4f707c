"""
Session data models for workout recording.

``WorkoutSession`` is the open, mutable in-memory session; ``WorkoutRecord``
is the finalized summary handed to the store.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from src.exercises.catalog import Exercise
from src.exercises.state import Severity


class FeedbackEntry(BaseModel):
    """One logged feedback event."""
    message: str
    severity: Severity
    timestamp: datetime


class WorkoutSession(BaseModel):
    """A workout in progress."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    exercise: Exercise
    start_time: datetime
    end_time: Optional[datetime] = None
    reps: int = 0
    form_scores: list[int] = Field(default_factory=list)
    feedback: list[FeedbackEntry] = Field(default_factory=list)


class WorkoutRecord(BaseModel):
    """Finished workout summary, as persisted."""
    user_id: str
    exercise_id: str
    exercise_name: str
    start_time: datetime
    end_time: datetime
    duration: int = Field(description="Whole seconds between start and end")
    reps: int = Field(description="Reps, or seconds held for timed exercises")
    form_score: int = Field(ge=0, le=100, description="Mean per-frame form score")
    feedback: list[FeedbackEntry] = Field(default_factory=list)
