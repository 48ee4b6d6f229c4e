"""
In-memory TTL cache.

Instances are owned by the application state (``app.state``) rather than
living at module level, and take an injectable clock so expiry can be
tested without sleeping.
"""

import logging
import time
from typing import Any, Callable, Dict, Generic, Optional, Tuple, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TTLCache(Generic[V]):
    """
    Dictionary-backed cache whose entries expire ``ttl_seconds`` after
    being set.

    Expired entries are dropped when read. When ``max_size`` is reached,
    the oldest inserted entry is evicted to make room.

    Usage:
        cache = TTLCache(ttl_seconds=300, max_size=10_000)
        cache.set(token, user)
        user = cache.get(token)
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_size: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            ttl_seconds: Lifetime of an entry in seconds
            max_size: Maximum number of entries (None for unbounded)
            clock: Monotonic time source, in seconds
        """
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_size is not None and max_size < 1:
            raise ValueError("max_size must be at least 1")

        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._clock = clock
        self._entries: Dict[str, Tuple[V, float]] = {}

    def get(self, key: str) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if expires_at <= self._clock():
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: V) -> None:
        # Re-inserting moves the key to the end of the eviction order
        self._entries.pop(key, None)

        if self.max_size is not None and len(self._entries) >= self.max_size:
            oldest = next(iter(self._entries))
            del self._entries[oldest]

        self._entries[key] = (value, self._clock() + self.ttl_seconds)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def evict_expired(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, (_, expires_at) in self._entries.items() if expires_at <= now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Evicted %d expired cache entries", len(expired))
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None
