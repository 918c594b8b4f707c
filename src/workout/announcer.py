"""
Voice announcement scheduling.

Decides *when* a message may be spoken, not *what* is said: callers pass in
ready-made text. Accepted messages are delivered to an async ``speak`` sink
strictly one at a time in FIFO order. An optional periodic task injects
motivational messages and is cancelled with :meth:`Announcer.stop`.
"""

import asyncio
import logging
import random
import time
from collections import deque
from typing import Awaitable, Callable, Optional

from src.pipelines.config import (
    FEEDBACK_COOLDOWN_S,
    MOTIVATIONAL_COOLDOWN_S,
    MOTIVATIONAL_INTERVAL_S,
)

logger = logging.getLogger(__name__)

SpeakFn = Callable[[str], Awaitable[None]]

MOTIVATIONAL_MESSAGES = (
    "You're doing great! Keep pushing!",
    "Stay strong! You've got this!",
    "Every rep counts! Keep going!",
    "You're stronger than you think!",
    "Focus on your breathing!",
    "Push through! You're almost there!",
    "Remember why you started!",
    "You're building something amazing!",
    "Stay consistent! You're making progress!",
    "Your future self will thank you!",
    "One more rep! You can do it!",
    "You're crushing it!",
    "Keep that energy!",
    "You're unstoppable!",
    "Every movement matters!",
)


def random_motivational_message(rng: Optional[random.Random] = None) -> str:
    """Pick one line from :data:`MOTIVATIONAL_MESSAGES`."""
    return (rng or random).choice(MOTIVATIONAL_MESSAGES)


async def wait_cancelled(tasks: list[asyncio.Task]) -> None:
    """Wait for cancelled tasks to unwind."""
    for task in tasks:
        try:
            await task
        except asyncio.CancelledError:
            pass


class Announcer:
    """FIFO announcement queue with per-kind cooldowns.

    Args:
        speak: Coroutine function delivering one message (TTS, websocket, ...).
        motivational_source: Returns the next motivational line; when None the
            periodic task is not started.
        feedback_cooldown: Minimum seconds between accepted feedback messages.
        motivational_cooldown: Minimum seconds between motivational messages.
        motivational_interval: ``(low, high)`` bounds of the jittered period.
        clock: Monotonic clock in seconds.
        rng: Random source for the jitter.
    """

    def __init__(
        self,
        speak: SpeakFn,
        motivational_source: Optional[Callable[[], str]] = None,
        feedback_cooldown: float = FEEDBACK_COOLDOWN_S,
        motivational_cooldown: float = MOTIVATIONAL_COOLDOWN_S,
        motivational_interval: tuple[float, float] = MOTIVATIONAL_INTERVAL_S,
        clock: Callable[[], float] = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self.speak = speak
        self.motivational_source = motivational_source
        self.feedback_cooldown = feedback_cooldown
        self.motivational_cooldown = motivational_cooldown
        self.motivational_interval = motivational_interval
        self.clock = clock
        self.rng = rng or random.Random()

        self._pending: deque[str] = deque()
        self._ready = asyncio.Event()
        self._last_feedback: Optional[float] = None
        self._last_motivational: Optional[float] = None
        self._worker: Optional[asyncio.Task] = None
        self._motivator: Optional[asyncio.Task] = None
        self.speaking: bool = False

    # ------------------------------------------------------------------
    # Enqueueing
    # ------------------------------------------------------------------

    def announce_feedback(self, message: str, force: bool = False) -> bool:
        """Queue a form/progress message unless it falls in the cooldown.

        Returns:
            True if the message was accepted.
        """
        if not message:
            return False
        now = self.clock()
        if (not force and self._last_feedback is not None
                and now - self._last_feedback < self.feedback_cooldown):
            return False
        self._last_feedback = now
        self._enqueue(message)
        return True

    def announce_motivational(self, message: str) -> bool:
        if not message:
            return False
        now = self.clock()
        if (self._last_motivational is not None
                and now - self._last_motivational < self.motivational_cooldown):
            return False
        self._last_motivational = now
        self._enqueue(message)
        return True

    @property
    def pending(self) -> list[str]:
        """Messages waiting to be spoken, oldest first."""
        return list(self._pending)

    # ------------------------------------------------------------------
    # Task lifecycle
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._worker is not None

    def start(self) -> None:
        """Start the delivery worker (and motivator) on the running loop."""
        if self._worker is not None:
            return
        loop = asyncio.get_running_loop()
        self._worker = loop.create_task(self._deliver())
        if self.motivational_source is not None:
            self._motivator = loop.create_task(self._motivate())

    def cancel(self) -> list[asyncio.Task]:
        """Cancel both tasks and drop the queue without waiting.

        Returns:
            The cancelled tasks, for :func:`wait_cancelled`.
        """
        tasks = [t for t in (self._worker, self._motivator) if t is not None]
        self._worker = None
        self._motivator = None
        for task in tasks:
            task.cancel()
        self.clear_queue()
        self.speaking = False
        return tasks

    async def stop(self) -> None:
        """Cancel both tasks and drop everything still queued."""
        await wait_cancelled(self.cancel())

    def clear_queue(self) -> None:
        self._pending.clear()
        self._ready.clear()

    def _enqueue(self, message: str) -> None:
        self._pending.append(message)
        self._ready.set()

    async def _deliver(self) -> None:
        while True:
            while not self._pending:
                self._ready.clear()
                await self._ready.wait()
            message = self._pending.popleft()
            self.speaking = True
            try:
                await self.speak(message)
            except asyncio.CancelledError:
                raise
            except Exception:
                # A broken sink must not kill the worker
                logger.exception("Announcement failed: %r", message)
            finally:
                self.speaking = False

    async def _motivate(self) -> None:
        low, high = self.motivational_interval
        while True:
            await asyncio.sleep(self.rng.uniform(low, high))
            self.announce_motivational(self.motivational_source())
