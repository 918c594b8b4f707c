"""
Push-up form rules.

Primary joint: left elbow (shoulder-elbow-wrist). Tracked coordinate: left
shoulder Y.
"""

from typing import Optional

from .base import ThresholdPhaseDetector, clamp_score, optional_joint
from .geometry import calculate_angle, midpoint_y
from .landmarks import Frame, PoseLandmark as P, get_landmark, visible_landmarks
from .state import FormFeedback, RepPhase

REQUIRED_JOINTS = (
    P.LEFT_SHOULDER, P.RIGHT_SHOULDER,
    P.LEFT_ELBOW, P.RIGHT_ELBOW,
    P.LEFT_WRIST, P.RIGHT_WRIST,
)
# Hips are needed for the alignment penalty as well
SCORE_JOINTS = REQUIRED_JOINTS + (P.LEFT_HIP, P.RIGHT_HIP)

MAX_BODY_TILT = 0.15
MIN_ELBOW_ANGLE = 70.0
EXTENDED_ELBOW_ANGLE = 160.0
WRIST_SHOULDER_TOLERANCE = 0.1

BOTTOM_ANGLE = 90.0
TOP_ANGLE = 160.0


class PushupValidator:
    """Form validator for push-ups."""

    def __init__(self):
        self.phase = ThresholdPhaseDetector(bottom=BOTTOM_ANGLE, top=TOP_ANGLE)

    def reset(self) -> None:
        self.phase.reset()

    def validate_form(self, frame: Frame) -> FormFeedback:
        joints = visible_landmarks(frame, REQUIRED_JOINTS)
        if joints is None:
            return FormFeedback.warning("Please ensure your upper body is visible")
        l_shoulder, r_shoulder, l_elbow, _r_elbow, l_wrist, r_wrist = joints

        # Body should be horizontal: shoulders level with hips
        l_hip = optional_joint(frame, P.LEFT_HIP)
        r_hip = optional_joint(frame, P.RIGHT_HIP)
        if l_hip and r_hip:
            vertical_diff = abs(midpoint_y(l_shoulder, r_shoulder) - midpoint_y(l_hip, r_hip))
            if vertical_diff > MAX_BODY_TILT:
                return FormFeedback.error(
                    "Keep your body straight - align shoulders with hips"
                )

        elbow_angle = calculate_angle(l_shoulder, l_elbow, l_wrist)
        if elbow_angle < MIN_ELBOW_ANGLE:
            return FormFeedback.warning(
                "Lower your body more - aim for 90 degrees at the bottom"
            )
        # Arms extended: report good without looking at the wrists
        if elbow_angle > EXTENDED_ELBOW_ANGLE:
            return FormFeedback.good("Good form! Keep your core engaged")

        if midpoint_y(l_wrist, r_wrist) > midpoint_y(l_shoulder, r_shoulder) + WRIST_SHOULDER_TOLERANCE:
            return FormFeedback.warning("Keep your hands below your shoulders")

        return FormFeedback.good()

    def detect_rep_phase(
        self, frame: Frame, previous_frame: Optional[Frame] = None
    ) -> RepPhase:
        joints = visible_landmarks(frame, (P.LEFT_SHOULDER, P.LEFT_ELBOW, P.LEFT_WRIST))
        if joints is None:
            return RepPhase.NONE
        shoulder, elbow, wrist = joints

        reference = None
        previous_shoulder = get_landmark(previous_frame, P.LEFT_SHOULDER)
        if previous_shoulder is not None:
            reference = previous_shoulder.y

        return self.phase.update(
            calculate_angle(shoulder, elbow, wrist), shoulder.y, reference
        )

    def calculate_form_score(self, frame: Frame) -> int:
        joints = visible_landmarks(frame, SCORE_JOINTS)
        if joints is None:
            return 0
        l_shoulder, r_shoulder, l_elbow, r_elbow, l_wrist, r_wrist, l_hip, r_hip = joints

        score = 100.0

        alignment_diff = abs(midpoint_y(l_shoulder, r_shoulder) - midpoint_y(l_hip, r_hip))
        score -= min(30.0, alignment_diff * 200)

        elbow_angle = calculate_angle(l_shoulder, l_elbow, l_wrist)
        if elbow_angle < MIN_ELBOW_ANGLE or elbow_angle > 180:
            score -= 20  # poor range of motion

        right_elbow_angle = calculate_angle(r_shoulder, r_elbow, r_wrist)
        score -= min(20.0, abs(elbow_angle - right_elbow_angle) * 2)

        return clamp_score(score)
