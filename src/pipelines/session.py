"""
Workout context: the single owner of all per-session mutable state.

Processes one pose frame at a time:
    1. Form validation + score (active/idle gated)
    2. Phase detection
    3. Rep / time counting
    4. Recording (scores, feedback log, reps)
    5. Voice announcements (optional)
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel

from src.exercises.catalog import Exercise, get_exercise
from src.exercises.landmarks import Frame
from src.exercises.state import FormFeedback, RepPhase, Severity
from src.workout.announcer import Announcer, wait_cancelled
from src.workout.recorder import WorkoutRecorder

from .config import SCORE_ALERT_BELOW, SCORE_CHANGE_THRESHOLD, VOICE_ENABLED
from .form_analysis import analyze_form
from .rep_counter import RepCounter

logger = logging.getLogger(__name__)


class FrameResult(BaseModel):
    """Everything the UI / voice layer needs after one frame."""
    feedback: FormFeedback
    score: int
    phase: RepPhase
    rep_count: int
    target: int
    active: bool


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class WorkoutContext:
    """Tracks one exercise for one user.

    Args:
        exercise: Initially selected exercise.
        recorder: Session recorder (owns persistence).
        announcer: Optional voice announcer; started and stopped with the
            workout when an event loop is running.
        clock: Monotonic clock shared with the timed counter.
        voice_enabled: Whether to push announcements at all.
    """

    def __init__(
        self,
        exercise: Exercise,
        recorder: WorkoutRecorder,
        announcer: Optional[Announcer] = None,
        clock: Callable[[], float] = time.monotonic,
        voice_enabled: bool = VOICE_ENABLED,
    ):
        self.recorder = recorder
        self.announcer = announcer
        self.clock = clock
        self.voice_enabled = voice_enabled
        self.active = False
        self._use(exercise)

    def _use(self, exercise: Exercise) -> None:
        self.exercise = exercise
        self.validator = exercise.new_validator()
        self.counter = RepCounter(timed=exercise.timed, clock=self.clock)
        self._clear_frame_memory()

    def _clear_frame_memory(self) -> None:
        self._previous_frame: Optional[Frame] = None
        self._last_logged_message: Optional[str] = None
        self._last_announced_reps = 0
        self._last_announced_score = 100

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def select_exercise(self, exercise_id: str) -> Exercise:
        """Switch exercise, discarding all phase and count state.

        Raises:
            ValueError: Unknown exercise ID.
            RuntimeError: A workout is in progress.
        """
        if self.active:
            raise RuntimeError("Stop the current workout before switching exercise.")
        exercise = get_exercise(exercise_id)
        self._use(exercise)
        logger.info("Exercise selected: '%s'", exercise.id)
        return exercise

    def start(self) -> None:
        """Begin tracking: reset state, open a session, start timers."""
        if self.active:
            return
        self.counter.reset()
        self.validator.reset()
        self._clear_frame_memory()
        self.recorder.start_session(self.exercise)

        self.active = True
        self.counter.activate()

        if _running_loop() is not None:
            self.counter.start_ticker()
            if self.announcer is not None and self.voice_enabled:
                self.announcer.start()

    def halt(self) -> Awaitable[Optional[str]]:
        """Stop tracking immediately and hand back the pending save.

        Counting, announcements and the session summary are all settled
        before this returns, so a ``start`` issued while the save is still
        being awaited opens a fresh session that the save leaves alone.

        Returns:
            Awaitable resolving to the workout ID from the store, or None if
            no session was open.
        """
        cancelled: list[asyncio.Task] = []
        if self.active:
            self.active = False
            self.counter.deactivate()
            self.recorder.update_reps(self.counter.count)
            if self.announcer is not None:
                cancelled = self.announcer.cancel()
        return self._finish(self.recorder.finish_session(), cancelled)

    async def _finish(
        self, saving: Awaitable[Optional[str]], cancelled: list[asyncio.Task]
    ) -> Optional[str]:
        try:
            return await saving
        finally:
            await wait_cancelled(cancelled)

    async def stop(self) -> Optional[str]:
        """Stop tracking and save the session.

        Calling ``stop`` again after a failed save retries the save.

        Returns:
            Workout ID from the store, or None if no session was open.

        Raises:
            PersistenceError: If the store failed (session kept for retry).
        """
        return await self.halt()

    # ------------------------------------------------------------------
    # Per-frame processing
    # ------------------------------------------------------------------

    def process_frame(self, frame: Optional[Frame]) -> FrameResult:
        """Run the full per-frame pipeline on one pose frame.

        Args:
            frame: 33 landmarks, or None when the estimator found no person.
        """
        analysis = analyze_form(self.validator, frame, self.active)

        if not self.active or not frame:
            return self._result(analysis.feedback, analysis.score, RepPhase.NONE)

        phase = self.validator.detect_rep_phase(frame, self._previous_frame)
        self._previous_frame = frame

        if self.counter.timed:
            reps = self.counter.tick()
        else:
            reps = self.counter.update(phase)

        self._record(analysis.feedback, analysis.score, reps)
        self._announce(analysis.feedback, analysis.score, reps)

        logger.debug(
            "frame: phase=%s reps=%d score=%d severity=%s",
            phase.value, reps, analysis.score, analysis.feedback.severity.value,
        )
        return self._result(analysis.feedback, analysis.score, phase)

    def _result(self, feedback: FormFeedback, score: int, phase: RepPhase) -> FrameResult:
        return FrameResult(
            feedback=feedback,
            score=score,
            phase=phase,
            rep_count=self.counter.count,
            target=self.exercise.target,
            active=self.active,
        )

    def _record(self, feedback: FormFeedback, score: int, reps: int) -> None:
        self.recorder.add_form_score(score)
        self.recorder.update_reps(reps)

        # Log each new issue once; repeats of the same cue are suppressed
        if feedback.severity == Severity.GOOD:
            self._last_logged_message = None
        elif feedback.message != self._last_logged_message:
            self.recorder.add_feedback(feedback.message, feedback.severity)
            self._last_logged_message = feedback.message

    def _announce(self, feedback: FormFeedback, score: int, reps: int) -> None:
        if self.announcer is None or not self.voice_enabled:
            return

        if feedback.severity in (Severity.WARNING, Severity.ERROR):
            self.announcer.announce_feedback(feedback.message)

        if not self.counter.timed and reps != self._last_announced_reps:
            self.announcer.announce_feedback(str(reps))
            self._last_announced_reps = reps

        if abs(score - self._last_announced_score) > SCORE_CHANGE_THRESHOLD:
            if score < SCORE_ALERT_BELOW:
                self.announcer.announce_feedback(f"Form score {score}")
            self._last_announced_score = score
