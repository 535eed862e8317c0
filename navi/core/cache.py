# core/cache.py
"""
Single-value cache with an explicit timestamp and TTL.
"""

import time
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Holds one value and the moment it was stored.

    ``clock`` defaults to ``time.monotonic`` and is injectable so tests can
    move time without sleeping.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value: Optional[T] = None
        self._stored_at: Optional[float] = None

    @property
    def stored_at(self) -> Optional[float]:
        return self._stored_at

    def is_fresh(self) -> bool:
        if self._stored_at is None:
            return False
        return (self._clock() - self._stored_at) < self.ttl_seconds

    def get(self) -> Optional[T]:
        """Return the cached value, or None once expired."""
        return self._value if self.is_fresh() else None

    def set(self, value: T) -> None:
        self._value = value
        self._stored_at = self._clock()

    def clear(self) -> None:
        self._value = None
        self._stored_at = None
