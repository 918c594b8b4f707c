"""
Rep counting over a stream of movement phases.

Rep-based exercises count one repetition per DOWN -> UP edge. Timed exercises
(plank) count whole seconds while the workout is active.
"""

import asyncio
import logging
import math
import time
from enum import Enum
from typing import Callable, Optional

from src.exercises.state import RepPhase

from .config import TIMED_TICK_S

logger = logging.getLogger(__name__)


class CounterState(str, Enum):
    IDLE = "idle"
    DOWN = "down"
    UP = "up"
    HOLD = "hold"
    TIMED = "timed"


_PHASE_TO_STATE = {
    RepPhase.DOWN: CounterState.DOWN,
    RepPhase.UP: CounterState.UP,
    RepPhase.HOLD: CounterState.HOLD,
}


class RepCounter:
    """Finite-state rep counter.

    HOLD and NONE phases never overwrite the remembered direction, so a hold
    at the bottom followed by UP still completes the rep, while UP -> HOLD ->
    UP does not count twice.

    Args:
        timed: Count elapsed seconds instead of reps.
        clock: Monotonic clock in seconds; injectable for tests.
        tick_interval: Period of the optional asyncio ticker (timed mode).
    """

    def __init__(
        self,
        timed: bool = False,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: float = TIMED_TICK_S,
    ):
        self.timed = timed
        self.clock = clock
        self.tick_interval = tick_interval

        self.count: int = 0
        self.state: CounterState = CounterState.IDLE
        self.current_phase: Optional[RepPhase] = None
        self._last_direction: Optional[RepPhase] = None

        self.active: bool = False
        self.start_time: Optional[float] = None
        self._ticker: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Rep mode
    # ------------------------------------------------------------------

    def update(self, phase: RepPhase) -> int:
        """Consume one phase observation and return the current count."""
        if self.timed or not self.active or phase == RepPhase.NONE:
            return self.count

        if phase == RepPhase.UP and self._last_direction == RepPhase.DOWN:
            self.count += 1
            logger.debug("Rep completed: %d", self.count)

        if phase in (RepPhase.UP, RepPhase.DOWN):
            self._last_direction = phase
        self.current_phase = phase
        self.state = _PHASE_TO_STATE[phase]
        return self.count

    # ------------------------------------------------------------------
    # Activation / timed mode
    # ------------------------------------------------------------------

    def activate(self) -> None:
        """Start counting. Timed mode resumes from the frozen count."""
        if self.active:
            return
        self.active = True
        if self.timed:
            self.start_time = self.clock() - self.count
            self.state = CounterState.TIMED

    def deactivate(self) -> None:
        """Stop counting; the count stays frozen at its last value.

        Timed mode takes a final reading first, so whole seconds elapsed
        since the last tick are kept.
        """
        if not self.active:
            return
        if self.timed:
            self.tick()
        self.active = False
        self._cancel_ticker()
        if self.timed:
            self.start_time = None
            self.state = CounterState.IDLE

    def tick(self) -> int:
        """Refresh the timed count to the whole seconds elapsed so far."""
        if self.timed and self.active and self.start_time is not None:
            elapsed = math.floor(self.clock() - self.start_time)
            self.count = max(self.count, int(elapsed))
        return self.count

    def start_ticker(self) -> Optional[asyncio.Task]:
        """Schedule :meth:`tick` once per interval on the running event loop."""
        if not self.timed or self._ticker is not None:
            return self._ticker
        self._ticker = asyncio.get_running_loop().create_task(self._run_ticker())
        return self._ticker

    async def _run_ticker(self) -> None:
        while self.active:
            await asyncio.sleep(self.tick_interval)
            self.tick()

    def _cancel_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    @property
    def has_pending_timer(self) -> bool:
        return self._ticker is not None

    def reset(self) -> None:
        """Zero the count and forget all phase and timer state.

        The counter is left inactive; call :meth:`activate` to start again.
        """
        self._cancel_ticker()
        self.active = False
        self.count = 0
        self.current_phase = None
        self._last_direction = None
        self.state = CounterState.IDLE
        self.start_time = None
