"""
Bundle Analyzer - bundle size reports for a running dev build

Main modules:
- build: Output classification, build completion gate, stats change detection
- watcher: Stats directory watch loop
- analysis: Single-flight summarization and report construction
- cache_backend: Artifact cache
- api: Request orchestration and the analyze routes
- addon: Build tool lifecycle hooks
- config: Configuration loading
"""

from .addon import BundleAnalyzerAddon
from .api.main import create_app
from .config.config_loader import AnalyzerConfig, AnalyzerOptions, load_analyzer_config

__version__ = "1.0.0"
__all__ = [
    'BundleAnalyzerAddon',
    'create_app',
    'AnalyzerConfig',
    'AnalyzerOptions',
    'load_analyzer_config',
]
