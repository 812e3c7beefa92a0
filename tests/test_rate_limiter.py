"""Tests for the process-wide rate limiter"""
import time

from vendor_intake.utils.rate_limiter import RateLimiter


def test_blocks_after_budget_is_spent():
    limiter = RateLimiter(max_requests=2, window_seconds=60)

    assert limiter.hit()
    assert limiter.hit()
    assert not limiter.hit()
    assert limiter.remaining == 0


def test_budget_is_shared_by_every_caller():
    limiter = RateLimiter(max_requests=3, window_seconds=60)

    limiter.hit()

    assert limiter.remaining == 2


def test_window_rolls_over():
    limiter = RateLimiter(max_requests=1, window_seconds=1)

    assert limiter.hit()
    assert not limiter.hit()
    time.sleep(1.1)
    assert limiter.hit()


def test_reset_restores_budget():
    limiter = RateLimiter(max_requests=1, window_seconds=60)
    limiter.hit()

    limiter.reset()

    assert limiter.remaining == 1
    assert limiter.hit()


def test_limiters_do_not_share_memory_storage():
    first = RateLimiter(max_requests=1, window_seconds=60)
    second = RateLimiter(max_requests=1, window_seconds=60)

    first.hit()

    assert second.hit()


def test_sub_second_window_is_clamped():
    assert RateLimiter(max_requests=1, window_seconds=0).window_seconds == 1
