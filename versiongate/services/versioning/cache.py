"""
TTL Cache

Small in-memory cache with per-entry expiry and an injectable clock, so
feature flag freshness can be tested without waiting on the wall clock.

Author: Khalil Bannouri
Version: 1.0.0
"""

import time
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass
class _Entry(Generic[T]):
    value: T
    expires_at: float


class TTLCache(Generic[T]):
    """
    Key/value cache whose entries expire after a time-to-live.

    Example:
        >>> cache = TTLCache(clock=lambda: 0.0)
        >>> cache.set("flags", [], ttl=300)
        >>> cache.get("flags")
        []
    """

    def __init__(self, clock: Optional[Clock] = None):
        """
        Args:
            clock: Monotonic time source in seconds (default: time.monotonic)
        """
        self._clock: Clock = clock or time.monotonic
        self._entries: dict[str, _Entry[T]] = {}

    def get(self, key: str) -> Optional[T]:
        """Return the value for key, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._clock() >= entry.expires_at:
            return None
        return entry.value

    def set(self, key: str, value: T, ttl: float) -> None:
        """Store value under key for ttl seconds."""
        self._entries[key] = _Entry(value=value, expires_at=self._clock() + ttl)

    def peek(self, key: str) -> Optional[T]:
        """Return the stored value for key even if it has expired."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

