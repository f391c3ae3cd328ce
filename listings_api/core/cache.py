import threading
import time
from typing import Callable, Mapping, Optional
from cachetools import TTLCache

from ..schemas import Listing

# Filtered, immutable listing set for one channel.
ChannelBucket = tuple[Listing, ...]

class BucketCache:
    """
    Typed in-process store for channel buckets.
    Entries expire a fixed ttl after they were written (no sliding renewal).
    TTLCache is not thread-safe on its own, so every access holds the lock.
    """
    def __init__(self, ttl_seconds: float, maxsize: int = 16, timer: Callable[[], float] = time.monotonic):
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._cache.ttl

    def get(self, channel: str) -> Optional[ChannelBucket]:
        with self._lock:
            return self._cache.get(channel)

    def set_many(self, buckets: Mapping[str, ChannelBucket]) -> None:
        """Store all buckets under one lock so readers never see half a population."""
        with self._lock:
            for channel, bucket in buckets.items():
                self._cache[channel] = tuple(bucket)

    def expire(self) -> None:
        """Drop expired entries now instead of waiting for the next write."""
        with self._lock:
            self._cache.expire()

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
