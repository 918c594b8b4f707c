"""
Per-frame form analysis with uniform active/idle gating.
"""

from typing import NamedTuple, Optional

from src.exercises.base import ExerciseValidator
from src.exercises.landmarks import Frame
from src.exercises.state import NEUTRAL_FEEDBACK, NEUTRAL_SCORE, FormFeedback


class FormAnalysis(NamedTuple):
    feedback: FormFeedback
    score: int


NEUTRAL_ANALYSIS = FormAnalysis(NEUTRAL_FEEDBACK, NEUTRAL_SCORE)


def analyze_form(
    validator: ExerciseValidator,
    frame: Optional[Frame],
    is_active: bool,
) -> FormAnalysis:
    """Validate and score one frame.

    Args:
        validator: The current exercise's validator.
        frame: Landmarks for this frame, or None when no pose was detected.
        is_active: Whether a workout is currently being tracked.

    Returns:
        FormAnalysis with the validator's feedback and score, or the neutral
        "Ready to start" state when inactive or when there are no landmarks.
    """
    if not is_active or not frame:
        return NEUTRAL_ANALYSIS

    return FormAnalysis(
        feedback=validator.validate_form(frame),
        score=validator.calculate_form_score(frame),
    )
