"""
Squat form rules.

Primary joint: left knee (hip-knee-ankle). Tracked coordinate: left hip Y.
"""

from typing import Optional

from .base import ThresholdPhaseDetector, clamp_score, optional_joint
from .geometry import calculate_angle, midpoint_x
from .landmarks import Frame, PoseLandmark as P, get_landmark, visible_landmarks
from .state import FormFeedback, RepPhase

REQUIRED_JOINTS = (
    P.LEFT_HIP, P.RIGHT_HIP,
    P.LEFT_KNEE, P.RIGHT_KNEE,
    P.LEFT_ANKLE, P.RIGHT_ANKLE,
)

MAX_KNEE_ANKLE_OFFSET = 0.1
MIN_KNEE_ANGLE = 60.0
MAX_KNEE_ANGLE = 120.0
MAX_TORSO_OFFSET = 0.05

BOTTOM_ANGLE = 90.0
TOP_ANGLE = 150.0


class SquatValidator:
    """Form validator for bodyweight squats."""

    def __init__(self):
        self.phase = ThresholdPhaseDetector(bottom=BOTTOM_ANGLE, top=TOP_ANGLE)

    def reset(self) -> None:
        self.phase.reset()

    def validate_form(self, frame: Frame) -> FormFeedback:
        joints = visible_landmarks(frame, REQUIRED_JOINTS)
        if joints is None:
            return FormFeedback.warning("Please ensure your lower body is visible")
        l_hip, r_hip, l_knee, r_knee, l_ankle, r_ankle = joints

        # Knees should track over the toes
        if (abs(l_knee.x - l_ankle.x) > MAX_KNEE_ANKLE_OFFSET
                or abs(r_knee.x - r_ankle.x) > MAX_KNEE_ANKLE_OFFSET):
            return FormFeedback.error("Keep your knees aligned over your toes")

        knee_angle = calculate_angle(l_hip, l_knee, l_ankle)
        if knee_angle < MIN_KNEE_ANGLE:
            return FormFeedback.warning("Don't go too low - aim for 90 degrees")
        if knee_angle > MAX_KNEE_ANGLE:
            return FormFeedback.warning(
                "Lower your body more - aim for 90 degrees at the bottom"
            )

        l_shoulder = optional_joint(frame, P.LEFT_SHOULDER)
        r_shoulder = optional_joint(frame, P.RIGHT_SHOULDER)
        if l_shoulder and r_shoulder:
            offset = abs(midpoint_x(l_shoulder, r_shoulder) - midpoint_x(l_hip, r_hip))
            if offset > MAX_TORSO_OFFSET:
                return FormFeedback.warning(
                    "Keep your back straight - shoulders over hips"
                )

        return FormFeedback.good()

    def detect_rep_phase(
        self, frame: Frame, previous_frame: Optional[Frame] = None
    ) -> RepPhase:
        joints = visible_landmarks(frame, (P.LEFT_HIP, P.LEFT_KNEE, P.LEFT_ANKLE))
        if joints is None:
            return RepPhase.NONE
        hip, knee, ankle = joints

        reference = None
        previous_hip = get_landmark(previous_frame, P.LEFT_HIP)
        if previous_hip is not None:
            reference = previous_hip.y

        return self.phase.update(calculate_angle(hip, knee, ankle), hip.y, reference)

    def calculate_form_score(self, frame: Frame) -> int:
        joints = visible_landmarks(frame, REQUIRED_JOINTS)
        if joints is None:
            return 0
        l_hip, r_hip, l_knee, r_knee, l_ankle, r_ankle = joints

        score = 100.0

        knee_offsets = abs(l_knee.x - l_ankle.x) + abs(r_knee.x - r_ankle.x)
        score -= min(30.0, knee_offsets * 300)

        left_knee_angle = calculate_angle(l_hip, l_knee, l_ankle)
        score -= min(20.0, abs(left_knee_angle - 90) * 0.2)

        l_shoulder = optional_joint(frame, P.LEFT_SHOULDER)
        r_shoulder = optional_joint(frame, P.RIGHT_SHOULDER)
        if l_shoulder and r_shoulder:
            offset = abs(midpoint_x(l_shoulder, r_shoulder) - midpoint_x(l_hip, r_hip))
            score -= min(20.0, offset * 400)

        # Symmetry between legs
        right_knee_angle = calculate_angle(r_hip, r_knee, r_ankle)
        score -= min(20.0, abs(left_knee_angle - right_knee_angle) * 2)

        return clamp_score(score)
