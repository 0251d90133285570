import time

import pytest

from merchai.core.rate_limit import RATE_LIMITS, RateLimitConfig, RateLimiter


class TestRateLimiter:
    def test_allows_requests_within_limit(self, rate_limiter):
        config = RateLimitConfig(max_requests=5, window_ms=60_000)

        for _ in range(5):
            assert rate_limiter.is_allowed("test_key", config) is True

    def test_blocks_request_exceeding_limit(self, rate_limiter):
        config = RateLimitConfig(max_requests=3, window_ms=60_000)

        for _ in range(3):
            rate_limiter.is_allowed("test_key", config)

        assert rate_limiter.is_allowed("test_key", config) is False

    def test_denied_call_does_not_consume_capacity(self, rate_limiter, clock):
        config = RateLimitConfig(max_requests=2, window_ms=1_000)

        assert rate_limiter.is_allowed("test_key", config)
        clock.advance(500)
        assert rate_limiter.is_allowed("test_key", config)
        before = rate_limiter.get_remaining("test_key", config)

        clock.advance(100)
        assert rate_limiter.is_allowed("test_key", config) is False
        assert rate_limiter.get_remaining("test_key", config) == before == 0

        # Only the first recorded request has left the window; the denied
        # attempt at +600ms was never recorded.
        clock.advance(401)
        assert rate_limiter.get_remaining("test_key", config) == 1
        assert rate_limiter.is_allowed("test_key", config) is True

    def test_capacity_restored_after_window(self, rate_limiter, clock):
        config = RateLimitConfig(max_requests=2, window_ms=100)

        assert rate_limiter.is_allowed("test_key", config)
        assert rate_limiter.is_allowed("test_key", config)
        assert rate_limiter.is_allowed("test_key", config) is False

        clock.advance(150)
        assert rate_limiter.is_allowed("test_key", config) is True

    def test_window_boundary_is_exclusive(self, rate_limiter, clock):
        config = RateLimitConfig(max_requests=1, window_ms=100)

        assert rate_limiter.is_allowed("test_key", config)
        clock.advance(99)
        assert rate_limiter.is_allowed("test_key", config) is False
        clock.advance(1)
        assert rate_limiter.is_allowed("test_key", config) is True

    def test_resets_after_window_with_wall_clock(self):
        limiter = RateLimiter()
        config = RateLimitConfig(max_requests=2, window_ms=100)

        limiter.is_allowed("test_key", config)
        limiter.is_allowed("test_key", config)
        assert limiter.is_allowed("test_key", config) is False

        time.sleep(0.15)
        assert limiter.is_allowed("test_key", config) is True

    def test_tracks_remaining_requests(self, rate_limiter):
        config = RateLimitConfig(max_requests=5, window_ms=60_000)

        assert rate_limiter.get_remaining("test_key", config) == 5
        rate_limiter.is_allowed("test_key", config)
        assert rate_limiter.get_remaining("test_key", config) == 4
        rate_limiter.is_allowed("test_key", config)
        assert rate_limiter.get_remaining("test_key", config) == 3

    def test_get_remaining_is_read_only(self, rate_limiter):
        config = RateLimitConfig(max_requests=2, window_ms=60_000)

        for _ in range(5):
            rate_limiter.get_remaining("test_key", config)

        assert rate_limiter.get_remaining("test_key", config) == 2

    def test_keys_are_independent(self, rate_limiter):
        config = RateLimitConfig(max_requests=1, window_ms=60_000)

        assert rate_limiter.is_allowed("a", config)
        assert rate_limiter.is_allowed("a", config) is False
        assert rate_limiter.is_allowed("b", config) is True

    def test_reset_clears_key(self, rate_limiter):
        config = RateLimitConfig(max_requests=1, window_ms=60_000)

        rate_limiter.is_allowed("test_key", config)
        rate_limiter.reset("test_key")

        assert rate_limiter.get_remaining("test_key", config) == 1
        assert rate_limiter.is_allowed("test_key", config) is True

    def test_reset_unknown_key_is_noop(self, rate_limiter):
        rate_limiter.reset("never-used")

    def test_clear_drops_all_keys(self, rate_limiter):
        config = RateLimitConfig(max_requests=1, window_ms=60_000)
        rate_limiter.is_allowed("a", config)
        rate_limiter.is_allowed("b", config)

        rate_limiter.clear()

        assert rate_limiter.get_remaining("a", config) == 1
        assert rate_limiter.get_remaining("b", config) == 1

    def test_instances_do_not_share_state(self, clock):
        config = RateLimitConfig(max_requests=1, window_ms=60_000)
        first = RateLimiter(clock=clock)
        second = RateLimiter(clock=clock)

        first.is_allowed("test_key", config)

        assert second.is_allowed("test_key", config) is True

    def test_status_reports_retry_after(self, rate_limiter, clock):
        config = RateLimitConfig(max_requests=2, window_ms=1_000)

        rate_limiter.is_allowed("test_key", config)
        clock.advance(300)
        rate_limiter.is_allowed("test_key", config)
        clock.advance(100)

        status = rate_limiter.get_status("test_key", config)
        assert status.allowed is False
        assert status.remaining == 0
        assert status.limit == 2
        assert status.retry_after_ms == 600

    def test_status_with_capacity_has_no_retry_after(self, rate_limiter):
        config = RateLimitConfig(max_requests=2, window_ms=1_000)
        rate_limiter.is_allowed("test_key", config)

        status = rate_limiter.get_status("test_key", config)
        assert status.allowed is True
        assert status.remaining == 1
        assert status.retry_after_ms == 0


class TestRateLimitConfig:
    @pytest.mark.parametrize(
        "max_requests,window_ms", [(0, 1000), (-1, 1000), (5, 0), (5, -10)]
    )
    def test_rejects_non_positive_values(self, max_requests, window_ms):
        with pytest.raises(ValueError):
            RateLimitConfig(max_requests=max_requests, window_ms=window_ms)

    def test_category_windows(self):
        assert RATE_LIMITS["login"] == RateLimitConfig(5, 15 * 60 * 1000)
        assert RATE_LIMITS["mockup_generation"] == RateLimitConfig(10, 60_000)
        assert RATE_LIMITS["mockup_edit"] == RateLimitConfig(20, 60_000)
        assert RATE_LIMITS["mockup_export"] == RateLimitConfig(30, 60_000)
        assert RATE_LIMITS["api_call"] == RateLimitConfig(100, 60_000)
