"""
Workout session recorder.

Accumulates per-frame outputs (form scores, feedback, rep count) for the one
open session and, when the session ends, hands a summary record to the
workout store.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional

from src.exercises.catalog import Exercise
from src.exercises.state import Severity
from src.pipelines.config import DEMO_USER_ID, DEMO_WORKOUT_ID

from .state import FeedbackEntry, WorkoutRecord, WorkoutSession
from .store import PersistenceError, WorkoutStore

logger = logging.getLogger(__name__)


class WorkoutRecorder:
    """Records one workout session at a time for a single user.

    Args:
        user_id: Owner of the recorded sessions.
        store: Persistence collaborator used by :meth:`end_session`.
        now: Wall clock; injectable for tests.
    """

    def __init__(
        self,
        user_id: str,
        store: WorkoutStore,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.user_id = user_id
        self.store = store
        self.now = now
        self._session: Optional[WorkoutSession] = None
        # Session whose save is in flight; a new session may open meanwhile
        self._saving: Optional[WorkoutSession] = None

    @property
    def is_demo(self) -> bool:
        return self.user_id == DEMO_USER_ID

    def start_session(self, exercise: Exercise) -> WorkoutSession:
        if self._session is not None and self._session is not self._saving:
            logger.warning(
                "Discarding unfinished '%s' session to start '%s'.",
                self._session.exercise.id, exercise.id,
            )
        self._session = WorkoutSession(exercise=exercise, start_time=self.now())
        logger.info("Session started: exercise='%s' user='%s'", exercise.id, self.user_id)
        return self._session

    def add_form_score(self, score: int) -> None:
        if self._session is not None:
            self._session.form_scores.append(int(score))

    def add_feedback(self, message: str, severity: Severity) -> None:
        if self._session is not None:
            self._session.feedback.append(
                FeedbackEntry(message=message, severity=severity, timestamp=self.now())
            )

    def update_reps(self, reps: int) -> None:
        if self._session is not None:
            self._session.reps = reps

    def get_session(self) -> Optional[WorkoutSession]:
        return self._session

    def build_record(self, end_time: datetime) -> WorkoutRecord:
        """Summarize the open session as of *end_time*."""
        session = self._session
        if session is None:
            raise RuntimeError("No open session to summarize.")

        duration = round((end_time - session.start_time).total_seconds())
        scores = session.form_scores
        avg_score = round(sum(scores) / len(scores)) if scores else 100

        return WorkoutRecord(
            user_id=self.user_id,
            exercise_id=session.exercise.id,
            exercise_name=session.exercise.name,
            start_time=session.start_time,
            end_time=end_time,
            duration=max(0, duration),
            reps=session.reps,
            form_score=max(0, min(100, avg_score)),
            feedback=list(session.feedback),
        )

    async def end_session(self) -> Optional[str]:
        """Finalize the open session and save it.

        Returns:
            The stored workout ID, or None if no session was open (or its
            save is already in progress).

        Raises:
            PersistenceError: If the store fails. The session stays open so
                the caller can retry, unless a newer one replaced it.
        """
        return await self.finish_session()

    def finish_session(self) -> Awaitable[Optional[str]]:
        """Snapshot the open session now and return the pending save.

        The summary is taken before this returns, so a session started while
        the save is in flight is neither summarized nor closed by it.
        """
        session = self._session
        if session is None or session is self._saving:
            return self._nothing_to_save()

        end_time = self.now()
        record = self.build_record(end_time)
        self._saving = session
        return self._save(session, record, end_time)

    async def _nothing_to_save(self) -> Optional[str]:
        return None

    async def _save(
        self, session: WorkoutSession, record: WorkoutRecord, end_time: datetime
    ) -> Optional[str]:
        try:
            workout_id = await self.store.save_workout(record)
        except Exception as exc:
            if self.is_demo:
                logger.warning(
                    "Workout not saved (%s). This is expected in offline demo mode.", exc,
                )
                self._close(session, end_time)
                return DEMO_WORKOUT_ID
            if self._session is not session:
                logger.warning(
                    "Saving '%s' workout failed and a new session replaced it: %s",
                    session.exercise.id, exc,
                )
            else:
                logger.warning("Saving workout failed: %s", exc)
            if isinstance(exc, PersistenceError):
                raise
            raise PersistenceError(f"Could not save workout: {exc}") from exc
        finally:
            if self._saving is session:
                self._saving = None

        self._close(session, end_time)
        logger.info(
            "Session ended: id=%s reps=%d duration=%ds form=%d",
            workout_id, record.reps, record.duration, record.form_score,
        )
        return workout_id

    def _close(self, session: WorkoutSession, end_time: datetime) -> None:
        session.end_time = end_time
        if self._session is session:
            self._session = None
