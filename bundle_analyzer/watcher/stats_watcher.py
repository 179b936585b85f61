"""
Watch loop invalidating the artifact cache when raw stats really change.
"""
import asyncio
import logging
from pathlib import Path
from typing import AsyncIterator, Callable, Optional

from ..build.change_detector import StatsChangeDetector
from ..cache_backend.base import BaseArtifactCache
from ..core.models import StatsChange
from .sources import watchfiles_source


SourceFactory = Callable[[Path], AsyncIterator[StatsChange]]


class StatsWatchLoop:
    """
    Consumes stats change notifications and clears the cache on genuine
    content changes.

    Started lazily by the first request needing computed data; starting it
    again is a no-op while it runs. A loop whose source failed counts as
    stopped and is restarted by the next ensure_started().
    """

    def __init__(
        self,
        stats_dir: Path,
        detector: StatsChangeDetector,
        cache: BaseArtifactCache,
        source_factory: Optional[SourceFactory] = None
    ):
        """
        Initialize watch loop.

        Args:
            stats_dir: Raw stats directory to watch
            detector: Content change detector owning the fingerprint table
            cache: Artifact cache to invalidate
            source_factory: Builds the notification iterator for a directory
                (defaults to a watchfiles based source)
        """
        self.stats_dir = Path(stats_dir)
        self.detector = detector
        self.cache = cache
        self.source_factory = source_factory or watchfiles_source
        self.events_handled = 0
        self._task: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(__name__)

    @property
    def started(self) -> bool:
        return self._task is not None and not self._task.done()

    def ensure_started(self):
        if self.started:
            return

        self.logger.debug(f"Initializing watcher on json files in {self.stats_dir}")
        self._task = asyncio.create_task(self._run())

    async def handle_change(self, change: StatsChange) -> bool:
        """
        Process one notification.

        Returns:
            True if the cache was invalidated
        """
        self.events_handled += 1

        if not self.detector.check_and_update(change.path):
            return False

        self.logger.debug(f"Cache invalidated by {change.filename} ({change.kind.value})")
        await self.cache.clear()
        return True

    async def _run(self):
        try:
            async for change in self.source_factory(self.stats_dir):
                try:
                    await self.handle_change(change)
                except Exception as e:
                    self.logger.error(f"Failed to handle stats change for {change.filename}: {e}")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.error(f"Stats watcher on {self.stats_dir} failed, restarting on next request: {e}")
            return

        self.logger.debug("Stats watcher stopped")

    async def aclose(self):
        if self._task is None:
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
