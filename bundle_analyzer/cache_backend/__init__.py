from .base import BaseArtifactCache, CacheEntry
from .memory import InMemoryArtifactCache

__all__ = ['BaseArtifactCache', 'CacheEntry', 'InMemoryArtifactCache']
