from .config_loader import (
    AnalyzerConfig,
    AnalyzerOptions,
    BuildCommandConfig,
    ServerConfig,
    load_analyzer_config,
    get_analyzer_config,
)

__all__ = [
    'AnalyzerConfig',
    'AnalyzerOptions',
    'BuildCommandConfig',
    'ServerConfig',
    'load_analyzer_config',
    'get_analyzer_config',
]
