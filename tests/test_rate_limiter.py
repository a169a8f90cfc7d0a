"""
Unit tests for the fixed-window daily rate limiter.
"""
import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from weather_lookup.rate_limiter import MAX_REQUESTS, WINDOW_DURATION, RateLimiter

MIDNIGHT_AFTER_START = datetime(2024, 6, 2, 0, 0, tzinfo=timezone.utc)


class TestRateLimiterInitialization:
    def test_defaults(self, clock):
        limiter = RateLimiter(clock=clock)

        assert limiter.max_requests == MAX_REQUESTS == 999
        assert limiter.window_duration == WINDOW_DURATION == timedelta(hours=24)
        assert limiter.request_count == 0

    def test_window_starts_at_next_local_midnight(self, clock):
        limiter = RateLimiter(clock=clock)

        assert limiter.window_start == MIDNIGHT_AFTER_START

    def test_window_start_at_exact_midnight_moves_to_following_day(self, clock):
        clock.now = MIDNIGHT_AFTER_START
        limiter = RateLimiter(clock=clock)

        assert limiter.window_start == MIDNIGHT_AFTER_START + timedelta(days=1)


class TestRateLimiterCheck:
    def test_fresh_limiter_allows(self, clock):
        limiter = RateLimiter(clock=clock)

        status = limiter.check()

        assert status.allowed is True
        assert status.remaining == 999
        assert status.reset_at == MIDNIGHT_AFTER_START + timedelta(hours=24)

    def test_remaining_tracks_increments(self, clock):
        limiter = RateLimiter(max_requests=5, clock=clock)
        for _ in range(3):
            limiter.increment()

        status = limiter.check()

        assert status.allowed is True
        assert status.remaining == 2
        assert limiter.request_count == 3

    def test_blocks_when_count_reaches_max(self, clock):
        limiter = RateLimiter(clock=clock)
        for _ in range(limiter.max_requests):
            limiter.increment()

        status = limiter.check()

        assert status.allowed is False
        assert status.remaining == 0

    def test_check_does_not_consume_quota(self, clock):
        limiter = RateLimiter(max_requests=1, clock=clock)

        for _ in range(5):
            assert limiter.check().allowed is True
        assert limiter.request_count == 0

    def test_increment_past_capacity_is_permitted(self, clock):
        limiter = RateLimiter(max_requests=1, clock=clock)
        limiter.increment()
        limiter.increment()

        status = limiter.check()

        assert limiter.request_count == 2
        assert status.allowed is False
        assert status.remaining == 0

    def test_zero_capacity_never_allows(self, clock):
        limiter = RateLimiter(max_requests=0, clock=clock)

        assert limiter.check().allowed is False


class TestRateLimiterWindowRollover:
    def test_still_blocked_just_before_boundary(self, clock):
        limiter = RateLimiter(max_requests=2, clock=clock)
        limiter.increment()
        limiter.increment()

        clock.now = limiter.window_start + WINDOW_DURATION - timedelta(seconds=1)
        status = limiter.check()

        assert status.allowed is False
        assert limiter.request_count == 2

    def test_resets_once_window_has_elapsed(self, clock):
        limiter = RateLimiter(clock=clock)
        for _ in range(limiter.max_requests):
            limiter.increment()
        assert limiter.check().allowed is False

        boundary = limiter.window_start + WINDOW_DURATION
        clock.now = boundary
        status = limiter.check()

        assert status.allowed is True
        assert status.remaining == 999
        assert limiter.request_count == 0
        assert limiter.window_start == boundary
        assert status.reset_at == boundary + WINDOW_DURATION

    def test_reset_moves_window_start_to_now(self, clock):
        limiter = RateLimiter(clock=clock)
        later = limiter.window_start + timedelta(days=3, hours=5)
        clock.now = later

        limiter.check()

        assert limiter.window_start == later

    def test_no_reset_on_increment(self, clock):
        limiter = RateLimiter(clock=clock)
        clock.now = limiter.window_start + timedelta(days=2)

        limiter.increment()

        assert limiter.request_count == 1

    def test_clock_read_once_per_check(self, clock):
        mock_clock = Mock(side_effect=clock)
        limiter = RateLimiter(clock=mock_clock)
        mock_clock.reset_mock()

        limiter.check()

        assert mock_clock.call_count == 1


class TestRateLimiterConcurrency:
    def test_concurrent_increments_are_not_lost(self, clock):
        limiter = RateLimiter(max_requests=10000, clock=clock)

        def worker():
            for _ in range(100):
                limiter.increment()

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert limiter.request_count == 1000
        assert limiter.check().remaining == 9000


@pytest.mark.parametrize("used,expected_remaining", [(0, 3), (1, 2), (3, 0), (7, 0)])
def test_remaining_never_negative(clock, used, expected_remaining):
    limiter = RateLimiter(max_requests=3, clock=clock)
    for _ in range(used):
        limiter.increment()

    assert limiter.check().remaining == expected_remaining
