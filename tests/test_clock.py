"""Tests for the injectable clock."""

from datetime import date, datetime, timezone

from p2p_kernel.domain.clock import DeterministicClock, SystemClock


class TestDeterministicClock:

    def test_frozen_until_moved(self):
        clock = DeterministicClock()
        assert clock.now() == clock.now() == DeterministicClock.DEFAULT_INSTANT
        assert clock.today() == date(2025, 1, 15)

    def test_advance(self):
        clock = DeterministicClock()
        clock.advance(90)
        assert clock.now() == datetime(2025, 1, 15, 12, 1, 30, tzinfo=timezone.utc)

    def test_set_time(self):
        clock = DeterministicClock()
        clock.set_time(datetime(2026, 3, 1, tzinfo=timezone.utc))
        assert clock.today() == date(2026, 3, 1)


class TestSystemClock:

    def test_timezone_aware(self):
        assert SystemClock().now().tzinfo is not None
