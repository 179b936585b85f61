"""
Delayed callback scheduling used by the build gate.
"""
import asyncio
from typing import Callable, List, Optional, Protocol


class ScheduledCall(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledCall:
        ...


class LoopScheduler:
    """Schedules callbacks on the running asyncio event loop"""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)


class _ManualCall:

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Scheduler driven by explicit time advancement.

    Used wherever elapsed time must be simulated deterministically.
    """

    def __init__(self):
        self.now = 0.0
        self._calls: List[_ManualCall] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualCall:
        call = _ManualCall(self.now + delay, callback)
        self._calls.append(call)
        return call

    @property
    def pending(self) -> int:
        return len([c for c in self._calls if not c.cancelled])

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward and run every callback that became due.

        Returns:
            Number of callbacks executed
        """
        self.now += seconds
        due = sorted(
            (c for c in self._calls if not c.cancelled and c.due <= self.now),
            key=lambda c: c.due
        )
        self._calls = [c for c in self._calls if c not in due and not c.cancelled]
        for call in due:
            call.callback()
        return len(due)
