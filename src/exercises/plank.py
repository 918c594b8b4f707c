"""
Plank form rules.

The plank is a static hold: there is no rep cycle, so the phase is always
HOLD and progress is measured in seconds by the timed counter.
"""

from typing import Optional

from .base import clamp_score, optional_joint
from .geometry import calculate_angle, midpoint_y
from .landmarks import Frame, PoseLandmark as P, visible_landmarks
from .state import FormFeedback, RepPhase

REQUIRED_JOINTS = (
    P.LEFT_SHOULDER, P.RIGHT_SHOULDER,
    P.LEFT_HIP, P.RIGHT_HIP,
)
SCORE_JOINTS = REQUIRED_JOINTS + (P.LEFT_ANKLE, P.RIGHT_ANKLE)

MAX_VERTICAL_SPREAD = 0.1
MAX_HIP_RISE = 0.05
MAX_HIP_SAG = 0.08
MIN_KNEE_ANGLE = 160.0


class PlankValidator:
    """Form validator for the front plank."""

    def reset(self) -> None:
        pass

    def validate_form(self, frame: Frame) -> FormFeedback:
        joints = visible_landmarks(frame, REQUIRED_JOINTS)
        if joints is None:
            return FormFeedback.warning("Please ensure your body is visible")
        l_shoulder, r_shoulder, l_hip, r_hip = joints

        l_ankle = optional_joint(frame, P.LEFT_ANKLE)
        r_ankle = optional_joint(frame, P.RIGHT_ANKLE)
        if l_ankle and r_ankle:
            shoulder_y = midpoint_y(l_shoulder, r_shoulder)
            hip_y = midpoint_y(l_hip, r_hip)
            ankle_y = midpoint_y(l_ankle, r_ankle)

            spread = max(shoulder_y, hip_y, ankle_y) - min(shoulder_y, hip_y, ankle_y)
            if spread > MAX_VERTICAL_SPREAD:
                return FormFeedback.error(
                    "Keep your body straight - align shoulders, hips, and ankles"
                )
            if hip_y < shoulder_y - MAX_HIP_RISE:
                return FormFeedback.error("Lower your hips - keep your body straight")
            if hip_y > shoulder_y + MAX_HIP_SAG:
                return FormFeedback.error("Lift your hips - keep your body straight")

        l_knee = optional_joint(frame, P.LEFT_KNEE)
        if l_knee and l_ankle:
            if calculate_angle(l_hip, l_knee, l_ankle) < MIN_KNEE_ANGLE:
                return FormFeedback.warning("Straighten your legs - keep knees locked")

        return FormFeedback.good("Good form! Keep your core engaged")

    def detect_rep_phase(
        self, frame: Frame, previous_frame: Optional[Frame] = None
    ) -> RepPhase:
        return RepPhase.HOLD

    def calculate_form_score(self, frame: Frame) -> int:
        joints = visible_landmarks(frame, SCORE_JOINTS)
        if joints is None:
            return 0
        l_shoulder, r_shoulder, l_hip, r_hip, l_ankle, r_ankle = joints

        score = 100.0

        shoulder_y = midpoint_y(l_shoulder, r_shoulder)
        hip_y = midpoint_y(l_hip, r_hip)
        ankle_y = midpoint_y(l_ankle, r_ankle)
        spread = max(shoulder_y, hip_y, ankle_y) - min(shoulder_y, hip_y, ankle_y)
        score -= min(40.0, spread * 400)

        l_knee = optional_joint(frame, P.LEFT_KNEE)
        if l_knee:
            knee_angle = calculate_angle(l_hip, l_knee, l_ankle)
            score -= min(20.0, abs(knee_angle - 180) * 0.2)

        score -= min(20.0, abs(l_hip.y - r_hip.y) * 400)

        return clamp_score(score)
