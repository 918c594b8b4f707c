"""Tests for the per-exercise form validators.

Covers:
  - Check order and feedback messages for every exercise
  - Form score penalties and the 0-100 range
  - Rep phase detection through the two-threshold machine
  - Exercise catalog lookup
"""

import sys
from pathlib import Path

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.exercises import EXERCISES, ExerciseValidator, get_all_exercises, get_exercise
from src.exercises.base import ThresholdPhaseDetector, clamp_score
from src.exercises.landmarks import NUM_LANDMARKS, Landmark, PoseLandmark as P
from src.exercises.lunge import LungeValidator
from src.exercises.plank import PlankValidator
from src.exercises.pushup import PushupValidator
from src.exercises.squat import SquatValidator
from src.exercises.state import RepPhase, Severity


# ============================================================================
# Fixtures
# ============================================================================

def _make_frame(joints: dict, visibility: float = 0.9) -> list:
    """Create a 33-landmark frame; joints not listed are invisible."""
    frame = [Landmark(x=0.5, y=0.5, visibility=0.0) for _ in range(NUM_LANDMARKS)]
    for index, (x, y) in joints.items():
        frame[index] = Landmark(x=x, y=y, visibility=visibility)
    return frame


def _bend(vertex, angle_deg: float, length: float = 0.2, flip: bool = False):
    """Point forming *angle_deg* at *vertex* with the straight-down segment."""
    theta = np.radians(angle_deg)
    dx = length * np.sin(theta)
    return (vertex[0] - dx if flip else vertex[0] + dx, vertex[1] + length * np.cos(theta))


def _pushup_frame(elbow_angle: float, hip_y: float = 0.45) -> list:
    """Side-view push-up: shoulder above the elbow, wrist placed by angle."""
    shoulder = (0.3, 0.4)
    elbow = (0.3, 0.55)
    theta = np.radians(elbow_angle)
    wrist = (elbow[0] + 0.15 * np.sin(theta), elbow[1] - 0.15 * np.cos(theta))
    return _make_frame({
        P.LEFT_SHOULDER: shoulder, P.RIGHT_SHOULDER: shoulder,
        P.LEFT_ELBOW: elbow, P.RIGHT_ELBOW: elbow,
        P.LEFT_WRIST: wrist, P.RIGHT_WRIST: wrist,
        P.LEFT_HIP: (0.6, hip_y), P.RIGHT_HIP: (0.6, hip_y),
    })


def _squat_frame(
    knee_angle: float,
    knee_offset: float = 0.0,
    torso_offset: float = 0.0,
    shoulders: bool = True,
) -> list:
    ankle = (0.5, 0.9)
    knee = (0.5 + knee_offset, 0.7)
    hip = _bend(knee, knee_angle)
    joints = {
        P.LEFT_HIP: hip, P.RIGHT_HIP: hip,
        P.LEFT_KNEE: knee, P.RIGHT_KNEE: knee,
        P.LEFT_ANKLE: ankle, P.RIGHT_ANKLE: ankle,
    }
    if shoulders:
        shoulder = (hip[0] + torso_offset, hip[1] - 0.3)
        joints[P.LEFT_SHOULDER] = shoulder
        joints[P.RIGHT_SHOULDER] = shoulder
    return _make_frame(joints)


def _lunge_frame(
    front_angle: float = 90.0,
    back_angle: float = 170.0,
    knee_forward: float = 0.0,
    torso_height: float = 0.3,
) -> list:
    front_knee = (0.4 + knee_forward, 0.7)
    front_hip = _bend(front_knee, front_angle)
    back_knee = (0.8, 0.75)
    back_hip = _bend(back_knee, back_angle, flip=True)
    shoulder_y = (front_hip[1] + back_hip[1]) / 2 - torso_height
    return _make_frame({
        P.LEFT_HIP: front_hip, P.RIGHT_HIP: back_hip,
        P.LEFT_KNEE: front_knee, P.RIGHT_KNEE: back_knee,
        P.LEFT_ANKLE: (0.4, 0.9), P.RIGHT_ANKLE: (0.8, 0.95),
        P.LEFT_SHOULDER: (0.6, shoulder_y), P.RIGHT_SHOULDER: (0.6, shoulder_y),
    })


def _plank_frame(
    hip_y: float = 0.5,
    ankle_y: float = 0.5,
    knee_y: float = None,
    ankles: bool = True,
) -> list:
    if knee_y is None:
        knee_y = (hip_y + ankle_y) / 2
    joints = {
        P.LEFT_SHOULDER: (0.3, 0.5), P.RIGHT_SHOULDER: (0.3, 0.5),
        P.LEFT_HIP: (0.55, hip_y), P.RIGHT_HIP: (0.55, hip_y),
        P.LEFT_KNEE: (0.675, knee_y), P.RIGHT_KNEE: (0.675, knee_y),
    }
    if ankles:
        joints[P.LEFT_ANKLE] = (0.8, ankle_y)
        joints[P.RIGHT_ANKLE] = (0.8, ankle_y)
    return _make_frame(joints)


ALL_VALIDATORS = [PushupValidator, SquatValidator, PlankValidator, LungeValidator]


# ============================================================================
# Test: Push-up
# ============================================================================

class TestPushup:

    def test_shallow_elbow_warns_about_depth(self):
        v = PushupValidator()
        frame = _pushup_frame(65.0, hip_y=0.45)
        feedback = v.validate_form(frame)
        assert feedback.severity == Severity.WARNING
        assert feedback.message == "Lower your body more - aim for 90 degrees at the bottom"
        assert not feedback.is_valid
        # 10 for alignment, 20 for range of motion
        assert v.calculate_form_score(frame) == 70

    def test_sagging_body_is_error(self):
        feedback = PushupValidator().validate_form(_pushup_frame(120.0, hip_y=0.7))
        assert feedback.severity == Severity.ERROR
        assert feedback.message == "Keep your body straight - align shoulders with hips"

    def test_extended_arms_skip_wrist_check(self):
        """Wrists below the tolerance line still read as good at full extension."""
        feedback = PushupValidator().validate_form(_pushup_frame(170.0))
        assert feedback.severity == Severity.GOOD
        assert feedback.message == "Good form! Keep your core engaged"

    def test_wrist_check_in_mid_range(self):
        feedback = PushupValidator().validate_form(_pushup_frame(120.0))
        assert feedback.severity == Severity.WARNING
        assert feedback.message == "Keep your hands below your shoulders"

    def test_upper_body_not_visible(self):
        v = PushupValidator()
        frame = _pushup_frame(120.0)
        frame[P.LEFT_WRIST] = Landmark(x=0.4, y=0.6, visibility=0.3)
        feedback = v.validate_form(frame)
        assert feedback.message == "Please ensure your upper body is visible"
        assert v.calculate_form_score(frame) == 0
        assert v.detect_rep_phase(frame) == RepPhase.NONE

    def test_score_needs_hips(self):
        v = PushupValidator()
        frame = _pushup_frame(170.0)
        assert v.calculate_form_score(frame) == 90
        frame[P.LEFT_HIP] = Landmark(x=0.6, y=0.45, visibility=0.1)
        assert v.calculate_form_score(frame) == 0

    def test_phase_cycle(self):
        v = PushupValidator()
        phases = [v.detect_rep_phase(_pushup_frame(a)) for a in (170, 170, 65, 65, 170)]
        assert phases == [
            RepPhase.UP, RepPhase.HOLD, RepPhase.DOWN, RepPhase.HOLD, RepPhase.UP,
        ]

    def test_reset_forgets_phase(self):
        v = PushupValidator()
        v.detect_rep_phase(_pushup_frame(65))
        v.reset()
        assert v.detect_rep_phase(_pushup_frame(65)) == RepPhase.DOWN


# ============================================================================
# Test: Squat
# ============================================================================

class TestSquat:

    def test_parallel_squat_is_good(self):
        v = SquatValidator()
        frame = _squat_frame(90.0)
        assert v.validate_form(frame).message == "Good form!"
        assert v.calculate_form_score(frame) == 100

    def test_knee_alignment_checked_before_depth(self):
        """A standing frame with knees 0.15 forward reports the knees, not depth."""
        v = SquatValidator()
        frame = _squat_frame(170.0, knee_offset=0.15)
        feedback = v.validate_form(frame)
        assert feedback.severity == Severity.ERROR
        assert feedback.message == "Keep your knees aligned over your toes"
        assert v.calculate_form_score(frame) <= 70

    def test_too_shallow(self):
        feedback = SquatValidator().validate_form(_squat_frame(170.0))
        assert feedback.severity == Severity.WARNING
        assert feedback.message == "Lower your body more - aim for 90 degrees at the bottom"

    def test_too_deep(self):
        feedback = SquatValidator().validate_form(_squat_frame(45.0))
        assert feedback.message == "Don't go too low - aim for 90 degrees"

    def test_leaning_torso(self):
        feedback = SquatValidator().validate_form(_squat_frame(90.0, torso_offset=0.1))
        assert feedback.message == "Keep your back straight - shoulders over hips"

    def test_torso_check_skipped_without_shoulders(self):
        v = SquatValidator()
        frame = _squat_frame(90.0, shoulders=False)
        assert v.validate_form(frame).severity == Severity.GOOD
        assert v.calculate_form_score(frame) == 100

    def test_lower_body_not_visible(self):
        v = SquatValidator()
        frame = _squat_frame(90.0)
        frame[P.RIGHT_ANKLE] = None
        assert v.validate_form(frame).message == "Please ensure your lower body is visible"
        assert v.calculate_form_score(frame) == 0

    def test_phase_cycle(self):
        v = SquatValidator()
        phases = [v.detect_rep_phase(_squat_frame(a)) for a in (170, 80, 80, 170)]
        assert phases == [RepPhase.UP, RepPhase.DOWN, RepPhase.HOLD, RepPhase.UP]

    def test_middle_band_uses_previous_frame(self):
        """Between thresholds the hip moving down (y grows) means DOWN."""
        v = SquatValidator()
        phase = v.detect_rep_phase(_squat_frame(120.0), previous_frame=_squat_frame(170.0))
        assert phase == RepPhase.DOWN

    def test_middle_band_without_history(self):
        assert SquatValidator().detect_rep_phase(_squat_frame(120.0)) == RepPhase.NONE


# ============================================================================
# Test: Plank
# ============================================================================

class TestPlank:

    def test_straight_plank(self):
        v = PlankValidator()
        frame = _plank_frame()
        feedback = v.validate_form(frame)
        assert feedback.severity == Severity.GOOD
        assert feedback.message == "Good form! Keep your core engaged"
        assert v.calculate_form_score(frame) == 100

    def test_body_not_straight(self):
        feedback = PlankValidator().validate_form(_plank_frame(ankle_y=0.75))
        assert feedback.severity == Severity.ERROR
        assert feedback.message == "Keep your body straight - align shoulders, hips, and ankles"

    def test_hips_too_high(self):
        feedback = PlankValidator().validate_form(_plank_frame(hip_y=0.44))
        assert feedback.message == "Lower your hips - keep your body straight"

    def test_hips_sagging(self):
        feedback = PlankValidator().validate_form(_plank_frame(hip_y=0.59))
        assert feedback.message == "Lift your hips - keep your body straight"

    def test_bent_knees(self):
        feedback = PlankValidator().validate_form(_plank_frame(knee_y=0.7))
        assert feedback.severity == Severity.WARNING
        assert feedback.message == "Straighten your legs - keep knees locked"

    def test_phase_is_always_hold(self):
        v = PlankValidator()
        for frame in (_plank_frame(), _plank_frame(hip_y=0.44), _make_frame({})):
            assert v.detect_rep_phase(frame) == RepPhase.HOLD

    def test_score_needs_ankles(self):
        v = PlankValidator()
        frame = _plank_frame(ankles=False)
        assert v.validate_form(frame).severity == Severity.GOOD
        assert v.calculate_form_score(frame) == 0


# ============================================================================
# Test: Lunge
# ============================================================================

class TestLunge:

    def test_good_lunge(self):
        v = LungeValidator()
        frame = _lunge_frame()
        assert v.validate_form(frame).message == "Good form!"
        # Back knee at 170 costs 2 points
        assert v.calculate_form_score(frame) == 98

    def test_front_knee_past_toes(self):
        feedback = LungeValidator().validate_form(_lunge_frame(knee_forward=0.1))
        assert feedback.severity == Severity.ERROR
        assert feedback.message == "Keep your front knee behind your toes"

    def test_front_knee_depth(self):
        v = LungeValidator()
        assert v.validate_form(_lunge_frame(front_angle=130)).message == (
            "Lower your body more - aim for 90 degrees at the bottom"
        )
        assert v.validate_form(_lunge_frame(front_angle=60)).message == (
            "Don't go too low - aim for 90 degrees"
        )

    def test_bent_back_leg(self):
        feedback = LungeValidator().validate_form(_lunge_frame(back_angle=120))
        assert feedback.message == "Straighten your back leg"

    def test_leaning_forward(self):
        v = LungeValidator()
        frame = _lunge_frame(torso_height=0.02)
        assert v.validate_form(frame).message == "Keep your torso upright - don't lean forward"
        assert v.calculate_form_score(frame) == 78

    def test_phase_cycle(self):
        v = LungeValidator()
        phases = [v.detect_rep_phase(_lunge_frame(front_angle=a)) for a in (160, 80, 160)]
        assert phases == [RepPhase.UP, RepPhase.DOWN, RepPhase.UP]


# ============================================================================
# Test: Shared behaviour
# ============================================================================

class TestAllValidators:

    @pytest.mark.parametrize("validator_cls", ALL_VALIDATORS)
    def test_invisible_frame(self, validator_cls):
        v = validator_cls()
        frame = _make_frame({})
        feedback = v.validate_form(frame)
        assert feedback.severity == Severity.WARNING
        assert feedback.message.startswith("Please ensure")
        assert v.calculate_form_score(frame) == 0

    @pytest.mark.parametrize("validator_cls", ALL_VALIDATORS)
    def test_random_frames_stay_in_range(self, validator_cls):
        rng = np.random.RandomState(7)
        v = validator_cls()
        for _ in range(100):
            frame = [
                Landmark(x=x, y=y, z=z, visibility=1.0)
                for x, y, z in rng.rand(NUM_LANDMARKS, 3)
            ]
            v.validate_form(frame)
            v.detect_rep_phase(frame)
            assert 0 <= v.calculate_form_score(frame) <= 100

    @pytest.mark.parametrize("validator_cls", ALL_VALIDATORS)
    def test_satisfies_protocol(self, validator_cls):
        assert isinstance(validator_cls(), ExerciseValidator)

    def test_clamp_score(self):
        assert clamp_score(-12.5) == 0
        assert clamp_score(130) == 100
        assert clamp_score(69.6) == 70


# ============================================================================
# Test: Phase machine
# ============================================================================

class TestThresholdPhaseDetector:

    def test_zones_signal_once_then_hold(self):
        d = ThresholdPhaseDetector(bottom=90, top=160)
        assert d.update(80, 0.5) == RepPhase.DOWN
        assert d.update(80, 0.5) == RepPhase.HOLD
        assert d.update(170, 0.4) == RepPhase.UP
        assert d.update(170, 0.4) == RepPhase.HOLD

    def test_middle_band_direction(self):
        d = ThresholdPhaseDetector(bottom=90, top=160)
        assert d.update(120, 0.50) == RepPhase.NONE
        assert d.update(120, 0.55) == RepPhase.DOWN
        # Jitter inside the deadband keeps the last direction
        assert d.update(120, 0.555) == RepPhase.DOWN
        assert d.update(120, 0.50) == RepPhase.UP

    def test_reference_only_used_without_memory(self):
        d = ThresholdPhaseDetector(bottom=90, top=160)
        assert d.update(120, 0.6, reference=0.5) == RepPhase.DOWN
        # Remembered 0.6 wins over the stale reference
        assert d.update(120, 0.5, reference=0.9) == RepPhase.UP

    def test_reset(self):
        d = ThresholdPhaseDetector(bottom=90, top=160)
        d.update(80, 0.5)
        d.reset()
        assert d.memory.previous_phase is None
        assert d.memory.previous_tracked is None


# ============================================================================
# Test: Catalog
# ============================================================================

class TestCatalog:

    def test_catalog_entries(self):
        ids = [ex.id for ex in get_all_exercises()]
        assert ids == ["pushup", "squat", "plank", "lunges"]
        assert EXERCISES["plank"].timed
        assert EXERCISES["plank"].target == 60
        assert not EXERCISES["squat"].timed

    def test_unknown_exercise(self):
        with pytest.raises(ValueError, match="not found"):
            get_exercise("burpee")

    def test_each_session_gets_fresh_validator(self):
        ex = get_exercise("squat")
        a, b = ex.new_validator(), ex.new_validator()
        assert isinstance(a, SquatValidator)
        assert a is not b
