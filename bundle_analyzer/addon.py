"""
Build tool lifecycle hooks.

init() decides where raw stats go and builds the process-wide context,
included() resolves the ignore patterns, server_middleware() mounts the
analyze routes on the host app.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

from fastapi import FastAPI

from .analysis.coalescer import ComputationCoalescer
from .analysis.summarizer import Summarizer
from .api.orchestrator import RequestOrchestrator
from .api.routers.analyze import create_analyze_router
from .build.gate import BuildCompletionGate
from .build.interceptor import StdoutInterceptor
from .build.scheduler import Scheduler
from .build.trigger import BuildTrigger
from .config.config_loader import AnalyzerOptions
from .core.context import AnalyzerContext, StatsActivation, STATS_PATH_ENV_VAR
from .core.models import IgnoreRules
from .watcher.stats_watcher import SourceFactory, StatsWatchLoop


# First concat plugin version honouring CONCAT_STATS_PATH
CONCAT_PATH_SUPPORT = '3.6.0'
# First concat plugin version reading CONCAT_STATS lazily, per build
CONCAT_LAZY_SUPPORT = '3.7.0'

FALLBACK_STATS_DIR = 'concat-stats-for'
OPTIONS_KEY = 'bundle-analyzer'


def parse_version(version: str) -> Tuple[int, ...]:
    parts = []
    for part in version.strip().lstrip('v').split('-')[0].split('+')[0].split('.'):
        digits = ''.join(ch for ch in part if ch.isdigit())
        if not digits:
            break
        parts.append(int(digits))
    while len(parts) < 3:
        parts.append(0)
    return tuple(parts)


class BundleAnalyzerAddon:
    """Hooks the analyzer into a build tool's dev server"""

    name = 'bundle-analyzer'

    def __init__(
        self,
        options: Optional[AnalyzerOptions] = None,
        environ: Optional[MutableMapping[str, str]] = None,
        scheduler: Optional[Scheduler] = None,
        summarizer: Optional[Summarizer] = None,
        source_factory: Optional[SourceFactory] = None
    ):
        """
        Initialize addon.

        Args:
            options: Analyzer options
            environ: Environment shared with the build process (os.environ)
            scheduler: Delay scheduler for the build gate
            summarizer: Summarization/report step
            source_factory: Stats notification source for the watch loop
        """
        self.options = options or AnalyzerOptions()
        self.environ = environ if environ is not None else os.environ
        self.scheduler = scheduler
        self.summarizer = summarizer
        self.source_factory = source_factory

        self.context: Optional[AnalyzerContext] = None
        self.orchestrator: Optional[RequestOrchestrator] = None
        self.watch_loop: Optional[StatsWatchLoop] = None
        self.interceptor: Optional[StdoutInterceptor] = None
        self.logger = logging.getLogger(__name__)

    @property
    def concat_version(self) -> Tuple[int, ...]:
        return parse_version(self.options.concat_version)

    def init(self) -> AnalyzerContext:
        self.logger.debug(f"{self.name} started.")

        activation = StatsActivation(self.environ)

        if self.concat_version < parse_version(CONCAT_LAZY_SUPPORT):
            self.logger.debug(
                f"concat v{self.options.concat_version} does not support lazy stats "
                f"activation, forced to activate prematurely."
            )
            activation.enable()

        self.context = AnalyzerContext(
            project_root=Path(self.options.project_root).resolve(),
            stats_dir=self.init_concat_stats_path(),
            gate=BuildCompletionGate(self.options.settle_delay, self.scheduler),
            activation=activation
        )
        return self.context

    def init_concat_stats_path(self) -> Path:
        """
        Pick the raw stats directory.

        Versions supporting a custom path get a temp directory outside the
        project, exported to the build through CONCAT_STATS_PATH.
        """
        if self.concat_version >= parse_version(CONCAT_PATH_SUPPORT):
            if self.options.stats_dir:
                stats_dir = Path(self.options.stats_dir).resolve()
            else:
                stats_dir = Path(tempfile.mkdtemp(prefix='bundle-analyzer-'))
            self.environ[STATS_PATH_ENV_VAR] = str(stats_dir)
        else:
            stats_dir = Path.cwd() / FALLBACK_STATS_DIR

        self.logger.debug(f"Using stats directory {stats_dir}")
        return stats_dir

    def included(self, app_options: Optional[Dict[str, Any]] = None) -> IgnoreRules:
        """
        Resolve ignore patterns for the host project.

        Args:
            app_options: Host project options; the 'bundle-analyzer' key
                overrides the configured ignore options
        """
        options = (app_options or {}).get(OPTIONS_KEY) or {}
        ignore = options.get('ignore', self.options.ignore)
        ignore_test_files = options.get('ignoreTestFiles', self.options.ignore_test_files)

        rules = IgnoreRules.from_options(ignore, ignore_test_files)
        self._require_context().ignore_rules = rules
        if self.orchestrator is not None:
            self.orchestrator.coalescer.ignore_rules = rules
        return rules

    def is_enabled(self) -> bool:
        return True

    def server_middleware(self, app: FastAPI):
        if self.is_enabled():
            self.add_analyze_middleware(app)

    def add_analyze_middleware(self, app: FastAPI):
        orchestrator = self.create_orchestrator()
        app.include_router(create_analyze_router(orchestrator))
        self.logger.info(f"Bundle analyzer available at {orchestrator.request_path}")

    def create_orchestrator(self) -> RequestOrchestrator:
        if self.orchestrator is not None:
            return self.orchestrator

        context = self._require_context()

        if self.options.intercept_stdout:
            self.interceptor = StdoutInterceptor(context.monitor)

        self.watch_loop = StatsWatchLoop(
            context.stats_dir,
            context.detector,
            context.cache,
            source_factory=self.source_factory
        )
        coalescer = ComputationCoalescer(
            context.stats_dir,
            context.ignore_rules,
            summarizer=self.summarizer
        )
        self.orchestrator = RequestOrchestrator(
            context,
            self.watch_loop,
            coalescer,
            BuildTrigger(context.project_root),
            request_path=self.options.request_path,
            livereload_url=self.options.livereload_url,
            interceptor=self.interceptor
        )
        return self.orchestrator

    async def shutdown(self):
        if self.watch_loop is not None:
            await self.watch_loop.aclose()
        if self.interceptor is not None:
            self.interceptor.uninstall()

    def _require_context(self) -> AnalyzerContext:
        if self.context is None:
            raise RuntimeError(f"{self.name}: init() must run before other hooks")
        return self.context
