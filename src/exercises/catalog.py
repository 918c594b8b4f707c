"""
Static catalog of supported exercises.

Maps exercise ID -> Exercise (display name, target, validator factory). The
catalog stores factories rather than validator instances so that every
workout session gets its own phase memory.
"""

from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from .base import ExerciseValidator
from .lunge import LungeValidator
from .plank import PlankValidator
from .pushup import PushupValidator
from .squat import SquatValidator


class Exercise(BaseModel):
    """One catalog entry."""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(description="Stable exercise identifier")
    name: str = Field(description="Display name")
    target: int = Field(description="Target reps, or seconds for timed exercises")
    timed: bool = Field(default=False, description="True for static holds counted in seconds")
    validator_factory: Callable[[], ExerciseValidator] = Field(exclude=True)

    def new_validator(self) -> ExerciseValidator:
        """Create a fresh validator with empty phase memory."""
        return self.validator_factory()


EXERCISES: dict[str, Exercise] = {
    "pushup": Exercise(
        id="pushup", name="Push-ups", target=20,
        validator_factory=PushupValidator,
    ),
    "squat": Exercise(
        id="squat", name="Squats", target=30,
        validator_factory=SquatValidator,
    ),
    "plank": Exercise(
        id="plank", name="Plank Hold", target=60, timed=True,
        validator_factory=PlankValidator,
    ),
    "lunges": Exercise(
        id="lunges", name="Lunges", target=24,
        validator_factory=LungeValidator,
    ),
}


def get_exercise(exercise_id: str) -> Exercise:
    """
    Look up an exercise by ID.

    Args:
        exercise_id: Catalog key, e.g. ``"squat"``.

    Returns:
        The matching Exercise.

    Raises:
        ValueError: If the exercise is not in the catalog.
    """
    if exercise_id in EXERCISES:
        return EXERCISES[exercise_id]
    valid = ", ".join(EXERCISES)
    raise ValueError(f"Exercise '{exercise_id}' not found. Valid IDs: {valid}")


def get_all_exercises() -> list[Exercise]:
    """Get all catalog entries in display order."""
    return list(EXERCISES.values())
