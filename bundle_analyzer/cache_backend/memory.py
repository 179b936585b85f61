import asyncio
from datetime import datetime
from typing import Any, Dict, Optional

from .base import BaseArtifactCache, CacheEntry


class InMemoryArtifactCache(BaseArtifactCache):
    """
    Single-slot in-memory artifact cache.

    Async-safe: uses asyncio.Lock so invalidation from the watch loop and
    population from request handlers never interleave.
    """

    def __init__(self):
        self.lock = asyncio.Lock()
        self._entry: Optional[CacheEntry] = None
        self._generation = 0

        self.stats = {
            'hits': 0,
            'misses': 0,
            'sets': 0,
            'invalidations': 0
        }

    async def get(self) -> Optional[str]:
        async with self.lock:
            if self._entry is None:
                self.stats['misses'] += 1
                return None

            self._entry.access_count += 1
            self.stats['hits'] += 1
            return self._entry.value

    @property
    def generation(self) -> int:
        return self._generation

    async def set(self, value: str, generation: Optional[int] = None) -> bool:
        async with self.lock:
            if generation is not None and generation != self._generation:
                return False
            self._entry = CacheEntry(value=value, created_at=datetime.now())
            self.stats['sets'] += 1
            return True

    async def clear(self) -> bool:
        async with self.lock:
            self._generation += 1
            if self._entry is None:
                return False
            self._entry = None
            self.stats['invalidations'] += 1
            return True

    def is_populated(self) -> bool:
        return self._entry is not None

    def get_stats(self) -> Dict[str, Any]:
        return {
            **self.stats,
            'populated': self._entry is not None,
            'generation': self._generation,
            'created_at': self._entry.created_at.isoformat() if self._entry else None
        }
