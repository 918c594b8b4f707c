"""
Shared validator machinery.

Every exercise implements the ``ExerciseValidator`` protocol. Rep-based
exercises share the two-threshold phase machine in ``ThresholdPhaseDetector``;
their only cross-frame memory is a ``PhaseMemory`` owned by the validator
instance.
"""

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable

from .landmarks import Frame, Landmark, get_landmark, is_visible
from .state import FormFeedback, RepPhase

# Minimum frame-to-frame movement of the tracked coordinate that counts as a
# direction change.
MOVEMENT_DEADBAND: float = 0.01


@runtime_checkable
class ExerciseValidator(Protocol):
    """Capability contract implemented once per exercise."""

    def validate_form(self, frame: Frame) -> FormFeedback:
        ...

    def detect_rep_phase(
        self, frame: Frame, previous_frame: Optional[Frame] = None
    ) -> RepPhase:
        ...

    def calculate_form_score(self, frame: Frame) -> int:
        ...

    def reset(self) -> None:
        ...


@dataclass
class PhaseMemory:
    """Validator-private state carried between frames."""
    previous_phase: Optional[RepPhase] = None
    previous_tracked: Optional[float] = None

    def clear(self) -> None:
        self.previous_phase = None
        self.previous_tracked = None


class ThresholdPhaseDetector:
    """Two-threshold finite-state machine on a primary joint angle.

    Below ``bottom`` the movement is at its lowest point, above ``top`` at its
    highest. Entering either zone is signalled once (DOWN / UP) and then
    reported as HOLD while the angle stays there. In between, the direction is
    inferred from how the tracked coordinate moved since the last frame.

    Args:
        bottom: Angle (degrees) below which the phase is DOWN.
        top: Angle (degrees) above which the phase is UP.
        deadband: Minimum |Δ tracked| treated as real movement.
    """

    def __init__(self, bottom: float, top: float, deadband: float = MOVEMENT_DEADBAND):
        self.bottom = bottom
        self.top = top
        self.deadband = deadband
        self.memory = PhaseMemory()

    def reset(self) -> None:
        self.memory.clear()

    def _enter(self, phase: RepPhase) -> RepPhase:
        if self.memory.previous_phase != phase:
            self.memory.previous_phase = phase
            return phase
        return RepPhase.HOLD

    def update(
        self,
        angle: float,
        tracked: float,
        reference: Optional[float] = None,
    ) -> RepPhase:
        """Advance the machine by one frame.

        Args:
            angle: Primary joint angle for this frame.
            tracked: Tracked image-space Y coordinate (grows downwards).
            reference: Fallback previous coordinate, used only when the
                machine has no remembered coordinate yet.

        Returns:
            RepPhase for this frame.
        """
        previous = self.memory.previous_tracked
        if previous is None:
            previous = reference
        self.memory.previous_tracked = tracked

        if angle < self.bottom:
            return self._enter(RepPhase.DOWN)
        if angle > self.top:
            return self._enter(RepPhase.UP)

        if previous is not None:
            movement = tracked - previous
            if abs(movement) > self.deadband:
                direction = RepPhase.DOWN if movement > 0 else RepPhase.UP
                if self.memory.previous_phase != direction:
                    self.memory.previous_phase = direction
                    return direction

        return self.memory.previous_phase or RepPhase.NONE


def optional_joint(frame: Frame, index: int) -> Optional[Landmark]:
    """Return the joint only if it passes the visibility gate."""
    landmark = get_landmark(frame, index)
    return landmark if is_visible(landmark) else None


def clamp_score(score: float) -> int:
    """Clamp a raw score into the 0-100 integer range."""
    return int(round(max(0.0, min(100.0, score))))
