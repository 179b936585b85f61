"""
Build completion gate.

Raw build output is noisy: one logical rebuild emits many "file changed"
lines and possibly several "Build successful" lines in quick succession.
The gate collapses that into a single question callers can wait on:
is a rebuild in flight right now?
"""
import asyncio
import logging
from typing import Optional

from ..core.enums import BuildEvent, BuildState
from .scheduler import LoopScheduler, ScheduledCall, Scheduler


DEFAULT_SETTLE_DELAY = 1.0


class BuildCompletionGate:
    """
    Two-state machine (IDLE, BUILDING) with one shared future per build cycle.

    Must be driven from the event loop thread.
    """

    def __init__(
        self,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        scheduler: Optional[Scheduler] = None
    ):
        """
        Initialize build gate.

        Args:
            settle_delay: Seconds to wait after a success marker before the
                cycle counts as finished
            scheduler: Delayed-call scheduler (defaults to the running loop)
        """
        self.settle_delay = settle_delay
        self.scheduler = scheduler or LoopScheduler()
        self.state = BuildState.IDLE
        self.cycles_completed = 0

        self._cycle_future: Optional[asyncio.Future] = None
        self._next_settle: Optional[asyncio.Future] = None
        self._settle_call: Optional[ScheduledCall] = None
        self.logger = logging.getLogger(__name__)

    @property
    def is_building(self) -> bool:
        return self.state is BuildState.BUILDING

    @property
    def settle_scheduled(self) -> bool:
        return self._settle_call is not None

    def handle_event(self, event: BuildEvent):
        if event is BuildEvent.FILE_MUTATED:
            self.on_mutated()
        elif event is BuildEvent.BUILD_SUCCEEDED:
            self.on_succeeded()

    def on_mutated(self):
        """Arm the gate; repeated mutations within a cycle reuse its future"""
        if self.state is BuildState.BUILDING:
            return

        if self._settle_call is not None:
            # A success seen while idle belongs to no cycle
            self._settle_call.cancel()
            self._settle_call = None

        self.logger.debug("Build cycle started")
        self.state = BuildState.BUILDING
        self._cycle_future = asyncio.get_running_loop().create_future()

    def on_succeeded(self):
        """Schedule settlement of the current cycle after the settle delay"""
        if self._settle_call is not None:
            return

        cycle_future = self._cycle_future if self.state is BuildState.BUILDING else None
        next_settle = self._next_settle

        self.logger.debug(f"Build success seen, settling in {self.settle_delay}s")
        self._settle_call = self.scheduler.call_later(
            self.settle_delay,
            lambda: self._settle(cycle_future, next_settle)
        )

    def await_settled(self) -> asyncio.Future:
        """
        Future for the end of the current build cycle.

        Returns:
            The shared cycle future while building, else a resolved future
        """
        if self.state is BuildState.BUILDING and self._cycle_future is not None:
            return self._cycle_future

        future = asyncio.get_running_loop().create_future()
        future.set_result(None)
        return future

    def await_next_settle(self) -> asyncio.Future:
        """
        Future resolved by the next settlement, even if no mutation has been
        seen yet. Used right after forcing a rebuild, before the build tool
        has reported anything.
        """
        if self._next_settle is None or self._next_settle.done():
            self._next_settle = asyncio.get_running_loop().create_future()
        return self._next_settle

    def _settle(
        self,
        cycle_future: Optional[asyncio.Future],
        next_settle: Optional[asyncio.Future]
    ):
        """Resolve only the futures that existed when the success was seen"""
        self._settle_call = None

        if cycle_future is not None and cycle_future is self._cycle_future:
            self.state = BuildState.IDLE
            self.cycles_completed += 1
            self._cycle_future = None

        if next_settle is not None and next_settle is self._next_settle:
            self._next_settle = None

        for future in (cycle_future, next_settle):
            if future is not None and not future.done():
                future.set_result(None)

        self.logger.debug("Build settled")
