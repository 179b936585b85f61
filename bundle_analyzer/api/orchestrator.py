"""
Sequences build waits, stats activation and computation for the analyze
endpoints.
"""
import asyncio
import logging
import traceback
from typing import Any, Dict, Optional

from ..analysis.coalescer import ComputationCoalescer
from ..analysis.livereload import DEFAULT_LIVERELOAD_URL, inject_livereload
from ..build.interceptor import StdoutInterceptor
from ..build.trigger import BuildTrigger
from ..core.context import AnalyzerContext
from ..core.enums import ResponseKind
from ..core.models import AnalyzeResponse
from ..watcher.stats_watcher import StatsWatchLoop


class RequestOrchestrator:
    """
    Boundary between HTTP requests and the coordination engine.

    Both operations are safe to retry. Shared waits are shielded so a client
    disconnecting cannot cancel a build wait or computation other requests
    are also waiting on.
    """

    def __init__(
        self,
        context: AnalyzerContext,
        watch_loop: StatsWatchLoop,
        coalescer: ComputationCoalescer,
        trigger: BuildTrigger,
        request_path: str = '/_analyze',
        livereload_url: str = DEFAULT_LIVERELOAD_URL,
        interceptor: Optional[StdoutInterceptor] = None
    ):
        self.context = context
        self.watch_loop = watch_loop
        self.coalescer = coalescer
        self.trigger = trigger
        self.request_path = request_path
        self.livereload_url = livereload_url
        self.interceptor = interceptor
        self._computation_generation = 0
        self.logger = logging.getLogger(__name__)

    def init_build_watcher(self):
        """Start classifying build output (idempotent)"""
        self.context.monitor.activate()
        if self.interceptor is not None:
            self.interceptor.install()

    async def view(self) -> AnalyzeResponse:
        self.init_build_watcher()
        self.watch_loop.ensure_started()

        await asyncio.shield(self.context.gate.await_settled())

        if not self.context.has_stats():
            return AnalyzeResponse(ResponseKind.COMPUTING)

        artifact = await self.context.cache.get()
        if artifact is None:
            return AnalyzeResponse(ResponseKind.COMPUTING)

        return AnalyzeResponse(ResponseKind.ARTIFACT, body=artifact)

    async def compute(self) -> AnalyzeResponse:
        self.watch_loop.ensure_started()
        self.init_build_watcher()

        try:
            await asyncio.shield(self.context.gate.await_settled())

            if not self.context.has_stats():
                self.context.activation.enable()
                rebuilt = self.context.gate.await_next_settle()
                # Raises before any wait when there is nothing to touch
                self.trigger.trigger_build()
                await asyncio.shield(rebuilt)

            if not self.coalescer.is_computing:
                # Joiners share the generation read when the computation started
                self._computation_generation = self.context.cache.generation
            generation = self._computation_generation

            output = await asyncio.shield(self.coalescer.compute_artifact())
            stored = await self.context.cache.set(
                inject_livereload(output, self.livereload_url),
                generation=generation
            )
            if not stored:
                self.logger.info("Stats changed during computation, discarding the stale report")

        except Exception as e:
            self.logger.error(f"Failed to compute bundle stats: {e}\n{traceback.format_exc()}")
            return AnalyzeResponse(ResponseKind.NO_STATS)

        return AnalyzeResponse(ResponseKind.REDIRECT, location=self.request_path)

    def status(self) -> Dict[str, Any]:
        gate = self.context.gate
        return {
            'build_state': gate.state.value,
            'build_cycles_completed': gate.cycles_completed,
            'stats_enabled': self.context.activation.enabled,
            'has_stats': self.context.has_stats(),
            'stats_dir': str(self.context.stats_dir),
            'watcher_started': self.watch_loop.started,
            'computing': self.coalescer.is_computing,
            'cache': self.context.cache.get_stats(),
        }
