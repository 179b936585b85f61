"""
Single-flight artifact computation.
"""
import asyncio
import logging
from pathlib import Path
from typing import Optional

from ..core.models import IgnoreRules
from .summarizer import ConcatStatsSummarizer, Summarizer


class ComputationCoalescer:
    """
    Runs at most one artifact computation at a time.

    Callers arriving while a computation is in flight share its result,
    or its exception. The pending slot is cleared when the computation
    finishes either way, so the next call starts fresh.
    """

    def __init__(
        self,
        stats_dir: Path,
        ignore_rules: IgnoreRules,
        summarizer: Optional[Summarizer] = None
    ):
        self.stats_dir = Path(stats_dir)
        self.ignore_rules = ignore_rules
        self.summarizer = summarizer or ConcatStatsSummarizer()
        self.runs = 0
        self._pending: Optional[asyncio.Task] = None
        self.logger = logging.getLogger(__name__)

    @property
    def is_computing(self) -> bool:
        return self._pending is not None

    def compute_artifact(self) -> asyncio.Future:
        if self._pending is None:
            self._pending = asyncio.create_task(self._compute())
        return self._pending

    async def _compute(self) -> str:
        loop = asyncio.get_running_loop()
        self.runs += 1
        self.logger.debug("Computing stats...")
        try:
            await loop.run_in_executor(
                None, self.summarizer.summarize_all, self.stats_dir, self.ignore_rules
            )
            self.logger.debug("Computing finished.")
            return await loop.run_in_executor(
                None, self.summarizer.create_output, self.stats_dir
            )
        finally:
            self._pending = None
