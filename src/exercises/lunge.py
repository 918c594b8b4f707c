"""
Lunge form rules.

The left leg is treated as the front leg and the right leg as the back leg.
Primary joint: front knee. Tracked coordinate: front knee Y.
"""

from typing import Optional

from .base import ThresholdPhaseDetector, clamp_score, optional_joint
from .geometry import calculate_angle, midpoint_y
from .landmarks import Frame, PoseLandmark as P, get_landmark, visible_landmarks
from .state import FormFeedback, RepPhase

REQUIRED_JOINTS = (
    P.LEFT_HIP, P.RIGHT_HIP,
    P.LEFT_KNEE, P.RIGHT_KNEE,
    P.LEFT_ANKLE, P.RIGHT_ANKLE,
)

MAX_KNEE_PAST_TOE = 0.05
MIN_FRONT_KNEE_ANGLE = 70.0
MAX_FRONT_KNEE_ANGLE = 110.0
MIN_BACK_KNEE_ANGLE = 150.0
MIN_TORSO_HEIGHT = 0.05

BOTTOM_ANGLE = 90.0
TOP_ANGLE = 150.0


class LungeValidator:
    """Form validator for forward lunges."""

    def __init__(self):
        self.phase = ThresholdPhaseDetector(bottom=BOTTOM_ANGLE, top=TOP_ANGLE)

    def reset(self) -> None:
        self.phase.reset()

    def _torso_too_low(self, frame: Frame, l_hip, r_hip) -> bool:
        l_shoulder = optional_joint(frame, P.LEFT_SHOULDER)
        r_shoulder = optional_joint(frame, P.RIGHT_SHOULDER)
        if not (l_shoulder and r_shoulder):
            return False
        torso_height = abs(midpoint_y(l_shoulder, r_shoulder) - midpoint_y(l_hip, r_hip))
        return torso_height < MIN_TORSO_HEIGHT

    def validate_form(self, frame: Frame) -> FormFeedback:
        joints = visible_landmarks(frame, REQUIRED_JOINTS)
        if joints is None:
            return FormFeedback.warning("Please ensure your lower body is visible")
        l_hip, r_hip, l_knee, r_knee, l_ankle, r_ankle = joints

        if l_knee.x - l_ankle.x > MAX_KNEE_PAST_TOE:
            return FormFeedback.error("Keep your front knee behind your toes")

        front_knee = calculate_angle(l_hip, l_knee, l_ankle)
        if front_knee < MIN_FRONT_KNEE_ANGLE:
            return FormFeedback.warning("Don't go too low - aim for 90 degrees")
        if front_knee > MAX_FRONT_KNEE_ANGLE:
            return FormFeedback.warning(
                "Lower your body more - aim for 90 degrees at the bottom"
            )

        if calculate_angle(r_hip, r_knee, r_ankle) < MIN_BACK_KNEE_ANGLE:
            return FormFeedback.warning("Straighten your back leg")

        if self._torso_too_low(frame, l_hip, r_hip):
            return FormFeedback.warning("Keep your torso upright - don't lean forward")

        return FormFeedback.good()

    def detect_rep_phase(
        self, frame: Frame, previous_frame: Optional[Frame] = None
    ) -> RepPhase:
        joints = visible_landmarks(frame, (P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_ANKLE))
        if joints is None:
            return RepPhase.NONE
        hip, knee, ankle = joints

        reference = None
        previous_knee = get_landmark(previous_frame, P.LEFT_KNEE)
        if previous_knee is not None:
            reference = previous_knee.y

        return self.phase.update(calculate_angle(hip, knee, ankle), knee.y, reference)

    def calculate_form_score(self, frame: Frame) -> int:
        joints = visible_landmarks(frame, REQUIRED_JOINTS)
        if joints is None:
            return 0
        l_hip, r_hip, l_knee, r_knee, l_ankle, r_ankle = joints

        score = 100.0
        score -= min(30.0, abs(l_knee.x - l_ankle.x) * 600)

        front_knee = calculate_angle(l_hip, l_knee, l_ankle)
        score -= min(20.0, abs(front_knee - 90) * 0.2)

        back_knee = calculate_angle(r_hip, r_knee, r_ankle)
        score -= min(20.0, abs(back_knee - 180) * 0.2)

        if self._torso_too_low(frame, l_hip, r_hip):
            score -= 20  # leaning forward

        return clamp_score(score)
