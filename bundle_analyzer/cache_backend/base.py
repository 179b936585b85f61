from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class CacheEntry:
    """Cached artifact with metadata"""
    value: str
    created_at: datetime
    access_count: int = 0


class BaseArtifactCache(ABC):
    """
    Base class for the artifact cache.

    Holds at most one computed artifact. The watch loop clears it while
    request handlers read and populate it, so implementations must
    serialize access.
    """

    @abstractmethod
    async def get(self) -> Optional[str]:
        """
        Get the cached artifact.

        Returns:
            Artifact or None if absent
        """
        pass

    @property
    @abstractmethod
    def generation(self) -> int:
        """Number of clear() calls so far, whether or not anything was dropped"""
        pass

    @abstractmethod
    async def set(self, value: str, generation: Optional[int] = None) -> bool:
        """
        Store a freshly computed artifact.

        Args:
            value: Artifact to store
            generation: Generation read before the artifact was computed;
                the value is discarded if the cache was cleared since

        Returns:
            True if the artifact was stored
        """
        pass

    @abstractmethod
    async def clear(self) -> bool:
        """
        Drop the cached artifact.

        Returns:
            True if an artifact was present
        """
        pass

    @abstractmethod
    def is_populated(self) -> bool:
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dict with stats like: hits, misses, sets, invalidations
        """
        pass
