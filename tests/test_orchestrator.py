"""
Test cases for RequestOrchestrator.
Rebuilds are simulated by feeding build output into the monitor and
advancing the manual scheduler past the settle delay.
"""

import asyncio
import os
import threading
from functools import partial
from unittest.mock import patch
import pytest

from bundle_analyzer.addon import BundleAnalyzerAddon, FALLBACK_STATS_DIR
from bundle_analyzer.analysis.summarizer import ConcatStatsSummarizer
from bundle_analyzer.config.config_loader import AnalyzerOptions
from bundle_analyzer.core.enums import BuildState, ChangeKind, ResponseKind
from bundle_analyzer.core.models import StatsChange
from bundle_analyzer.watcher.sources import watchfiles_source
from .conftest import wait_until, write_stats


def simulate_rebuild(context, scheduler):
    context.monitor.feed("file changed app/app.js\n")
    context.monitor.feed("Build successful (230ms) - Serving on http://localhost:4200/\n")
    context.monitor.feed("Build successful (12ms)\n")
    scheduler.advance(context.gate.settle_delay)


class GatedSummarizer(ConcatStatsSummarizer):
    """Summarizer that holds summarization until released"""

    def __init__(self):
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def summarize_all(self, stats_dir, ignore_rules):
        self.started.set()
        self.release.wait(timeout=5)
        return super().summarize_all(stats_dir, ignore_rules)


class TestView:
    """Test the view operation"""

    @pytest.mark.asyncio
    async def test_placeholder_before_stats_are_enabled(self, make_addon):
        addon = make_addon()
        orchestrator = addon.create_orchestrator()

        result = await orchestrator.view()

        assert result.kind is ResponseKind.COMPUTING
        assert orchestrator.watch_loop.started
        assert addon.context.monitor.active
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_placeholder_when_cache_is_empty(self, make_addon, environ):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()

        result = await addon.create_orchestrator().view()

        assert result.kind is ResponseKind.COMPUTING
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_cached_artifact_is_served(self, make_addon, environ):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        await addon.context.cache.set("<html>report</html>")

        result = await addon.create_orchestrator().view()

        assert result.kind is ResponseKind.ARTIFACT
        assert result.body == "<html>report</html>"
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_view_waits_for_build_in_flight(self, make_addon, environ, scheduler):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        context = addon.context
        orchestrator = addon.create_orchestrator()
        await context.cache.set("<html>report</html>")
        orchestrator.init_build_watcher()
        context.monitor.feed("file changed app/app.js\n")

        view = asyncio.create_task(orchestrator.view())
        await asyncio.sleep(0.05)
        assert not view.done()

        context.monitor.feed("Build successful\n")
        await asyncio.sleep(0.05)
        assert not view.done()

        scheduler.advance(1.0)
        result = await asyncio.wait_for(view, timeout=1.0)
        assert result.kind is ResponseKind.ARTIFACT
        await addon.shutdown()


class TestCompute:
    """Test the compute operation"""

    @pytest.mark.asyncio
    async def test_fresh_compute_triggers_build_then_caches(self, make_addon, environ, scheduler, app_project):
        addon = make_addon()
        context = addon.context
        orchestrator = addon.create_orchestrator()
        main_file = app_project / "app" / "app.js"
        os.utime(main_file, (1000, 1000))

        compute = asyncio.create_task(orchestrator.compute())
        await wait_until(lambda: context.activation.enabled)

        assert environ['CONCAT_STATS'] == 'true'
        assert main_file.stat().st_mtime > 1000
        assert not compute.done()
        assert not context.cache.is_populated()

        simulate_rebuild(context, scheduler)
        result = await asyncio.wait_for(compute, timeout=5.0)

        assert result.kind is ResponseKind.REDIRECT
        assert result.location == "/_analyze"
        assert context.gate.state is BuildState.IDLE

        view = await orchestrator.view()
        assert view.kind is ResponseKind.ARTIFACT
        assert "assets/vendor.js" in view.body
        assert '<script src="/ember-cli-live-reload.js"></script>' in view.body
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_compute_with_active_stats_skips_rebuild(self, make_addon, environ):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        orchestrator = addon.create_orchestrator()

        with patch.object(orchestrator.trigger, 'trigger_build') as mock_trigger:
            result = await asyncio.wait_for(orchestrator.compute(), timeout=5.0)

        assert result.kind is ResponseKind.REDIRECT
        mock_trigger.assert_not_called()
        assert addon.context.cache.is_populated()
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_missing_main_file_fails_fast(self, make_addon, empty_project, environ):
        addon = make_addon(project_root=empty_project)
        orchestrator = addon.create_orchestrator()

        result = await asyncio.wait_for(orchestrator.compute(), timeout=1.0)

        assert result.kind is ResponseKind.NO_STATS
        assert not addon.context.cache.is_populated()
        # The latch stays set even though the attempt failed
        assert environ['CONCAT_STATS'] == 'true'
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_computation_error_yields_no_stats(self, make_addon, environ, stats_dir):
        environ['CONCAT_STATS'] = 'true'
        (stats_dir / "assets-app.js.json").write_text("{not json")
        addon = make_addon()
        orchestrator = addon.create_orchestrator()

        result = await asyncio.wait_for(orchestrator.compute(), timeout=5.0)

        assert result.kind is ResponseKind.NO_STATS
        assert not orchestrator.coalescer.is_computing
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_concurrent_computes_run_one_summarization(self, make_addon, environ):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        orchestrator = addon.create_orchestrator()
        summarizer = orchestrator.coalescer.summarizer
        observed = []

        original_set = addon.context.cache.set

        async def recording_set(value, generation=None):
            observed.append(addon.context.cache.is_populated())
            stored = await original_set(value, generation=generation)
            observed.append(addon.context.cache.is_populated())
            return stored

        with patch.object(summarizer, 'summarize_all', wraps=summarizer.summarize_all) as summarize, \
                patch.object(addon.context.cache, 'set', side_effect=recording_set):
            results = await asyncio.wait_for(
                asyncio.gather(*[orchestrator.compute() for _ in range(8)]),
                timeout=5.0
            )

        assert summarize.call_count == 1
        assert all(r.kind is ResponseKind.REDIRECT for r in results)
        assert observed[0] is False
        assert all(observed[1:])
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_missing_fallback_stats_dir_forces_rebuild(self, environ, scheduler, app_project, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        addon = BundleAnalyzerAddon(
            AnalyzerOptions(project_root=str(app_project), concat_version='3.5.0', settle_delay=1.0),
            environ=environ,
            scheduler=scheduler,
            source_factory=partial(watchfiles_source, poll_interval=60)
        )
        context = addon.init()
        addon.included()
        orchestrator = addon.create_orchestrator()
        stats_dir = context.stats_dir
        main_file = app_project / "app" / "app.js"
        os.utime(main_file, (1000, 1000))

        assert stats_dir.name == FALLBACK_STATS_DIR
        assert context.activation.enabled
        assert (await orchestrator.view()).kind is ResponseKind.COMPUTING
        await asyncio.sleep(0.05)
        assert not stats_dir.exists()
        assert not context.has_stats()

        compute = asyncio.create_task(orchestrator.compute())
        await wait_until(lambda: main_file.stat().st_mtime > 1000)
        assert not compute.done()

        write_stats(stats_dir, "assets-app.js", "assets/app.js", {"app/app.js": 300})
        simulate_rebuild(context, scheduler)

        result = await asyncio.wait_for(compute, timeout=5.0)
        assert result.kind is ResponseKind.REDIRECT
        assert "assets/app.js" in await context.cache.get()
        await addon.shutdown()


class TestInvalidationScenarios:
    """End-to-end cache behaviour when stats files change"""

    @pytest.mark.asyncio
    async def test_identical_rewrite_keeps_artifact(self, make_addon, environ, queue_source, stats_dir):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        orchestrator = addon.create_orchestrator()
        stats_file = stats_dir / "assets-app.js.json"
        change = StatsChange(ChangeKind.CHANGED, stats_file.name, str(stats_dir))

        orchestrator.watch_loop.ensure_started()
        # First sighting of a file always counts as a change
        await queue_source.push(change)
        await orchestrator.compute()

        stats_file.write_text(stats_file.read_text())
        await queue_source.push(change)

        assert (await orchestrator.view()).kind is ResponseKind.ARTIFACT
        await addon.shutdown()

    @pytest.mark.asyncio
    async def test_changed_stats_show_placeholder_until_recomputed(self, make_addon, environ, queue_source, stats_dir):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        orchestrator = addon.create_orchestrator()
        stats_file = stats_dir / "assets-app.js.json"
        change = StatsChange(ChangeKind.CHANGED, stats_file.name, str(stats_dir))

        orchestrator.watch_loop.ensure_started()
        await queue_source.push(change)
        await orchestrator.compute()
        assert (await orchestrator.view()).kind is ResponseKind.ARTIFACT

        stats_file.write_text('{"outputFile": "assets/app.js", "sizes": {"app/new.js": 4096}}')
        await queue_source.push(change)
        assert (await orchestrator.view()).kind is ResponseKind.COMPUTING

        await orchestrator.compute()
        view = await orchestrator.view()
        assert view.kind is ResponseKind.ARTIFACT
        assert "app/new.js" in view.body
        await addon.shutdown()


    @pytest.mark.asyncio
    async def test_stats_changed_during_computation_discards_result(self, make_addon, environ, queue_source, stats_dir):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        orchestrator = addon.create_orchestrator()
        summarizer = GatedSummarizer()
        orchestrator.coalescer.summarizer = summarizer
        stats_file = stats_dir / "assets-app.js.json"
        change = StatsChange(ChangeKind.CHANGED, stats_file.name, str(stats_dir))

        orchestrator.watch_loop.ensure_started()
        await queue_source.push(change)

        compute = asyncio.create_task(orchestrator.compute())
        await wait_until(summarizer.started.is_set)

        stats_file.write_text('{"outputFile": "assets/app.js", "sizes": {"app/new.js": 4096}}')
        await queue_source.push(change)
        summarizer.release.set()

        result = await asyncio.wait_for(compute, timeout=5.0)
        assert result.kind is ResponseKind.REDIRECT
        assert not addon.context.cache.is_populated()

        await orchestrator.compute()
        view = await orchestrator.view()
        assert view.kind is ResponseKind.ARTIFACT
        assert "app/new.js" in view.body
        await addon.shutdown()


class TestStatus:
    """Test status reporting"""

    @pytest.mark.asyncio
    async def test_status_reflects_state(self, make_addon, environ, stats_dir):
        environ['CONCAT_STATS'] = 'true'
        addon = make_addon()
        orchestrator = addon.create_orchestrator()
        await orchestrator.compute()

        status = orchestrator.status()

        assert status['build_state'] == 'idle'
        assert status['stats_enabled'] is True
        assert status['has_stats'] is True
        assert status['stats_dir'] == str(stats_dir.resolve())
        assert status['watcher_started'] is True
        assert status['computing'] is False
        assert status['cache']['populated'] is True
        await addon.shutdown()
