"""Single-value TTL cache with explicit invalidation, shared across request threads."""

import threading
import time
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class TTLCache(Generic[T]):
    """
    Holds one computed value for ttl_seconds.

    invalidate() bumps a generation counter; a value computed under an older
    generation is returned to its caller but never stored, so a slow computation that
    raced with a write cannot repopulate the cache with pre-write data.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._value: T | None = None
        self._expires_at = 0.0
        self._has_value = False
        self._generation = 0

    def get(self) -> T | None:
        with self._lock:
            if self._has_value and self._clock() < self._expires_at:
                return self._value
            return None

    def set(self, value: T, generation: int | None = None) -> bool:
        """Store value; returns False when an invalidation happened after generation was read."""
        with self._lock:
            if generation is not None and generation != self._generation:
                return False
            self._value = value
            self._has_value = True
            self._expires_at = self._clock() + self.ttl_seconds
            return True

    def invalidate(self) -> None:
        with self._lock:
            self._generation += 1
            self._value = None
            self._has_value = False

    def get_or_compute(self, compute: Callable[[], T]) -> T:
        with self._lock:
            if self._has_value and self._clock() < self._expires_at:
                return self._value  # type: ignore[return-value]
            generation = self._generation
        value = compute()
        self.set(value, generation=generation)
        return value
