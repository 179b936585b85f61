"""Pytest configuration and fixtures for Bundle Analyzer tests."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Dict
import pytest
import logging

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bundle_analyzer.addon import BundleAnalyzerAddon
from bundle_analyzer.build.scheduler import ManualScheduler
from bundle_analyzer.config.config_loader import AnalyzerOptions

# Configure logging
logging.basicConfig(level=logging.DEBUG)


class QueueSource:
    """Stats notification source fed by the test through an asyncio.Queue"""

    def __init__(self):
        self._queue = None
        self.directories = []

    @property
    def queue(self) -> asyncio.Queue:
        if self._queue is None:
            self._queue = asyncio.Queue()
        return self._queue

    def __call__(self, directory):
        self.directories.append(directory)
        return self._iterate()

    async def _iterate(self):
        while True:
            change = await self.queue.get()
            if change is None:
                self.queue.task_done()
                return
            yield change
            # The consumer asked for the next change, so this one is handled
            self.queue.task_done()

    async def push(self, change):
        await self.queue.put(change)
        await self.queue.join()


def write_stats(stats_dir: Path, name: str, output_file: str, sizes: Dict[str, int]) -> Path:
    """Write one raw concat stats file"""
    stats_dir.mkdir(parents=True, exist_ok=True)
    path = stats_dir / f"{name}.json"
    path.write_text(json.dumps({'outputFile': output_file, 'sizes': sizes}))
    return path


async def wait_until(predicate, timeout: float = 2.0):
    """Yield to the loop until predicate() is true"""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


@pytest.fixture
def environ() -> Dict[str, str]:
    """Isolated environment shared with the simulated build"""
    return {}


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def queue_source() -> QueueSource:
    return QueueSource()


@pytest.fixture
def stats_dir(tmp_path) -> Path:
    path = tmp_path / "stats"
    write_stats(path, "assets-vendor.js", "assets/vendor.js", {
        "node_modules/jquery/dist/jquery.js": 8000,
        "vendor/loader.js": 2000,
    })
    write_stats(path, "assets-app.js", "assets/app.js", {
        "app/app.js": 300,
        "app/router.js": 100,
    })
    return path


@pytest.fixture
def app_project(tmp_path) -> Path:
    """Project with an entry file the analyzer can touch"""
    root = tmp_path / "project"
    (root / "app").mkdir(parents=True)
    (root / "app" / "app.js").write_text("export default {};\n")
    return root


@pytest.fixture
def empty_project(tmp_path) -> Path:
    root = tmp_path / "empty-project"
    root.mkdir()
    return root


@pytest.fixture
def make_addon(environ, scheduler, queue_source, stats_dir, app_project):
    """Build an initialized addon with injected collaborators"""

    def _make(**overrides) -> BundleAnalyzerAddon:
        options = AnalyzerOptions(
            project_root=str(overrides.pop('project_root', app_project)),
            stats_dir=str(overrides.pop('stats_dir', stats_dir)),
            concat_version=overrides.pop('concat_version', '3.7.0'),
            settle_delay=1.0,
            **overrides
        )
        addon = BundleAnalyzerAddon(
            options,
            environ=environ,
            scheduler=scheduler,
            source_factory=queue_source
        )
        addon.init()
        addon.included()
        return addon

    return _make
