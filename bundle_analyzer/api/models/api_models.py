from typing import Optional, Dict, Any
from pydantic import BaseModel


class CacheStatus(BaseModel):
    """Artifact cache statistics"""
    populated: bool
    created_at: Optional[str] = None
    hits: int = 0
    misses: int = 0
    sets: int = 0
    invalidations: int = 0
    generation: int = 0


class AnalyzerStatus(BaseModel):
    """Coordination state of the analyzer"""
    build_state: str
    build_cycles_completed: int
    stats_enabled: bool
    has_stats: bool
    stats_dir: str
    watcher_started: bool
    computing: bool
    cache: CacheStatus

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AnalyzerStatus':
        return cls(**{**data, 'cache': CacheStatus(**data['cache'])})
