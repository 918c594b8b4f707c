"""
Exercise module for the form coach.

Per-exercise geometric rule sets that turn one pose frame into form feedback,
a movement phase and a 0-100 form score.
"""

from .state import FormFeedback, RepPhase, Severity, NEUTRAL_FEEDBACK, NEUTRAL_SCORE
from .landmarks import Landmark, PoseLandmark, get_landmark, is_visible, frame_from_rows
from .geometry import calculate_angle, calculate_distance
from .base import ExerciseValidator, PhaseMemory
from .catalog import Exercise, EXERCISES, get_exercise, get_all_exercises

__all__ = [
    "FormFeedback",
    "RepPhase",
    "Severity",
    "NEUTRAL_FEEDBACK",
    "NEUTRAL_SCORE",
    "Landmark",
    "PoseLandmark",
    "get_landmark",
    "is_visible",
    "frame_from_rows",
    "calculate_angle",
    "calculate_distance",
    "ExerciseValidator",
    "PhaseMemory",
    "Exercise",
    "EXERCISES",
    "get_exercise",
    "get_all_exercises",
]
