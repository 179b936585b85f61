import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List, Union
from dataclasses import dataclass, field, asdict


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "127.0.0.1"
    port: int = 4300
    log_level: str = "INFO"


@dataclass
class AnalyzerOptions:
    """Bundle analyzer configuration"""
    request_path: str = "/_analyze"
    project_root: str = "."
    # Version of the concat plugin used by the build; decides where stats go
    concat_version: str = "3.7.0"
    # Overrides the temp directory chosen at init
    stats_dir: Optional[str] = None
    settle_delay: float = 1.0
    ignore: Union[str, List[str], None] = None
    ignore_test_files: bool = True
    livereload_url: str = "/ember-cli-live-reload.js"
    intercept_stdout: bool = False


@dataclass
class BuildCommandConfig:
    """Supervised build command"""
    command: Optional[str] = None
    cwd: Optional[str] = None


@dataclass
class AnalyzerConfig:
    """Top-level configuration"""
    server: ServerConfig = field(default_factory=ServerConfig)
    analyzer: AnalyzerOptions = field(default_factory=AnalyzerOptions)
    build: BuildCommandConfig = field(default_factory=BuildCommandConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalyzerConfig':
        """Create AnalyzerConfig from dictionary"""
        return cls(
            server=ServerConfig(**data.get('server', {})),
            analyzer=AnalyzerOptions(**data.get('analyzer', {})),
            build=BuildCommandConfig(**data.get('build', {}))
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> 'AnalyzerConfig':
        """Load AnalyzerConfig from YAML file"""
        path = Path(yaml_path)
        if not path.exists():
            return cls.default()

        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def default(cls) -> 'AnalyzerConfig':
        """Return default configuration"""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_analyzer_config: Optional[AnalyzerConfig] = None


def load_analyzer_config(config_path: Optional[str] = None) -> AnalyzerConfig:
    """
    Load configuration from YAML file.
    If no path provided, looks for bundle_analyzer.yaml in standard locations.
    """
    global _analyzer_config

    if config_path:
        _analyzer_config = AnalyzerConfig.from_yaml(config_path)
        return _analyzer_config

    search_paths = [
        Path("./bundle_analyzer.yaml"),
        Path("./config/bundle_analyzer.yaml"),
        Path.home() / ".config" / "bundle_analyzer.yaml",
    ]

    for path in search_paths:
        if path.exists():
            _analyzer_config = AnalyzerConfig.from_yaml(str(path))
            return _analyzer_config

    _analyzer_config = AnalyzerConfig.default()
    return _analyzer_config


def get_analyzer_config() -> AnalyzerConfig:
    """Get the loaded configuration"""
    global _analyzer_config
    if _analyzer_config is None:
        _analyzer_config = load_analyzer_config()
    return _analyzer_config
