"""
Process-wide analyzer state.

Exactly one AnalyzerContext is built per process (by the addon's init hook)
and handed to every component that needs shared state.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import MutableMapping, Optional

from ..build.change_detector import StatsChangeDetector
from ..build.gate import BuildCompletionGate
from ..build.monitor import BuildMonitor
from ..cache_backend.base import BaseArtifactCache
from ..cache_backend.memory import InMemoryArtifactCache
from .models import IgnoreRules


STATS_ENV_VAR = 'CONCAT_STATS'
STATS_PATH_ENV_VAR = 'CONCAT_STATS_PATH'

logger = logging.getLogger(__name__)


class StatsActivation:
    """
    One-way latch telling the build to emit raw stats.

    Backed by an environment variable the build process reads; once set it
    is never cleared.
    """

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None):
        self.environ = environ if environ is not None else os.environ

    @property
    def enabled(self) -> bool:
        return bool(self.environ.get(STATS_ENV_VAR))

    def enable(self):
        if self.enabled:
            return
        logger.debug("Enabled stats generation")
        self.environ[STATS_ENV_VAR] = 'true'


@dataclass
class AnalyzerContext:
    """Shared state: gate, fingerprints, cache slot and activation latch"""
    project_root: Path
    stats_dir: Path
    gate: BuildCompletionGate
    activation: StatsActivation
    detector: StatsChangeDetector = field(default_factory=StatsChangeDetector)
    cache: BaseArtifactCache = field(default_factory=InMemoryArtifactCache)
    ignore_rules: IgnoreRules = field(default_factory=IgnoreRules.from_options)
    monitor: Optional[BuildMonitor] = None

    def __post_init__(self):
        if self.monitor is None:
            self.monitor = BuildMonitor(self.gate)

    def has_stats(self) -> bool:
        """Stats generation is on and the stats directory exists"""
        return self.activation.enabled and self.stats_dir.exists()
