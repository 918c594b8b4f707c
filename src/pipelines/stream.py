"""
One-slot frame buffer with last-writer-wins semantics.

The pose estimator delivers frames at camera rate; if processing falls
behind, a newer frame simply replaces the stale one that was never picked up.
"""

import asyncio
from typing import Optional

from src.exercises.landmarks import Frame


class FrameStreamClosed(Exception):
    """Raised by :meth:`LatestFrame.get` once the producer has gone away."""


class LatestFrame:
    def __init__(self):
        self._frame: Optional[Frame] = None
        self._has_frame = False
        self._closed = False
        self._event = asyncio.Event()

    def put(self, frame: Optional[Frame]) -> None:
        """Offer a frame (None = no detection), replacing any unread one."""
        self._frame = frame
        self._has_frame = True
        self._event.set()

    def close(self) -> None:
        """Stop the consumer; an unread frame is dropped."""
        self._closed = True
        self._frame = None
        self._has_frame = False
        self._event.set()

    async def get(self) -> Optional[Frame]:
        """Wait for and take the newest frame."""
        while not self._has_frame:
            if self._closed:
                raise FrameStreamClosed()
            self._event.clear()
            await self._event.wait()
        frame = self._frame
        self._frame = None
        self._has_frame = False
        return frame
