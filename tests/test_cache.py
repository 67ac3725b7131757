"""Tests for the TTL stats cache."""

import unittest

from bookshelf.core.cache import TTLCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestTTLCache(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = FakeClock()
        self.cache: TTLCache[int] = TTLCache(30, clock=self.clock)
        self.calls = 0

    def compute(self) -> int:
        self.calls += 1
        return self.calls

    def test_value_served_until_ttl_expires(self) -> None:
        self.assertEqual(self.cache.get_or_compute(self.compute), 1)
        self.clock.now += 29
        self.assertEqual(self.cache.get_or_compute(self.compute), 1)
        self.clock.now += 2
        self.assertEqual(self.cache.get_or_compute(self.compute), 2)

    def test_invalidate_forces_recompute(self) -> None:
        self.cache.get_or_compute(self.compute)
        self.cache.invalidate()
        self.assertIsNone(self.cache.get())
        self.assertEqual(self.cache.get_or_compute(self.compute), 2)

    def test_computation_racing_an_invalidation_is_not_stored(self) -> None:
        def slow_compute() -> int:
            # A write lands while the aggregate is being computed.
            self.cache.invalidate()
            return 42

        self.assertEqual(self.cache.get_or_compute(slow_compute), 42)
        self.assertIsNone(self.cache.get())
        self.assertEqual(self.cache.get_or_compute(self.compute), 1)

    def test_set_with_stale_generation_is_rejected(self) -> None:
        self.assertTrue(self.cache.set(5, generation=0))
        self.cache.invalidate()
        self.assertFalse(self.cache.set(6, generation=0))
        self.assertIsNone(self.cache.get())
