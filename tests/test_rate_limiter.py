# File: tests/test_rate_limiter.py
import threading

import pytest

from conftest import DAY_SECONDS, FakeClock
from rate_limiter import RollingWindowRateLimiter


@pytest.mark.parametrize("limit", [1, 3, 5, 10])
def test_request_over_ceiling_is_rejected(limiter, limit):
    for _ in range(limit):
        assert limiter.hit("1.2.3.4", "keyword-research", limit).allowed

    rejected = limiter.hit("1.2.3.4", "keyword-research", limit)
    assert not rejected.allowed
    assert rejected.remaining == 0


def test_window_rolls_over(limiter, clock):
    for _ in range(3):
        limiter.hit("1.2.3.4", "website-analyzer", 3)
    assert not limiter.hit("1.2.3.4", "website-analyzer", 3).allowed

    clock.advance(DAY_SECONDS - 1)
    assert not limiter.hit("1.2.3.4", "website-analyzer", 3).allowed

    clock.advance(2)
    assert limiter.hit("1.2.3.4", "website-analyzer", 3).allowed


def test_window_is_rolling_not_fixed(limiter, clock):
    limiter.hit("c", "meta-generator", 2)
    clock.advance(DAY_SECONDS / 2)
    limiter.hit("c", "meta-generator", 2)
    assert not limiter.hit("c", "meta-generator", 2).allowed

    # only the first request has aged out
    clock.advance(DAY_SECONDS / 2 + 1)
    assert limiter.hit("c", "meta-generator", 2).allowed
    assert not limiter.hit("c", "meta-generator", 2).allowed


def test_rejections_are_not_counted(limiter, clock):
    limiter.hit("c", "backlink-checker", 1)
    for _ in range(5):
        limiter.hit("c", "backlink-checker", 1)

    clock.advance(DAY_SECONDS + 1)
    assert limiter.hit("c", "backlink-checker", 1).allowed


def test_keys_are_independent(limiter):
    limiter.hit("alice", "website-analyzer", 1)

    assert limiter.hit("bob", "website-analyzer", 1).allowed
    assert limiter.hit("alice", "keyword-research", 1).allowed
    assert not limiter.hit("alice", "website-analyzer", 1).allowed


def test_peek_does_not_charge(limiter):
    for _ in range(5):
        status = limiter.peek("c", "website-analyzer", 3)
        assert status.allowed
        assert status.remaining == 3

    assert limiter.hit("c", "website-analyzer", 3).remaining == 2


def test_status_headers(limiter, clock):
    limiter.hit("c", "website-analyzer", 3)
    clock.advance(100)
    status = limiter.hit("c", "website-analyzer", 3)

    assert status.headers() == {
        "RateLimit-Limit": "3",
        "RateLimit-Remaining": "1",
        "RateLimit-Reset": str(DAY_SECONDS - 100),
    }


def test_peek_does_not_track_new_callers(limiter):
    for n in range(5000):
        limiter.peek(f"10.0.{n // 256}.{n % 256}", "website-analyzer", 3)

    assert len(limiter._hits) == 0


def test_expired_callers_are_forgotten(limiter, clock):
    for n in range(5000):
        limiter.hit(f"10.0.{n // 256}.{n % 256}", "website-analyzer", 3)
    assert len(limiter._hits) == 5000

    clock.advance(2 * DAY_SECONDS)
    limiter.hit("newcomer", "website-analyzer", 3)

    assert len(limiter._hits) == 1


def test_emptied_window_drops_its_key(limiter, clock):
    limiter.hit("c", "keyword-research", 10)
    clock.advance(DAY_SECONDS + 1)

    status = limiter.peek("c", "keyword-research", 10)

    assert status.remaining == 10
    assert len(limiter._hits) == 0


def test_concurrent_hits_never_exceed_ceiling():
    limiter = RollingWindowRateLimiter(window_seconds=DAY_SECONDS, clock=FakeClock())
    allowed = []
    barrier = threading.Barrier(20)

    def worker():
        barrier.wait()
        allowed.append(limiter.hit("shared", "keyword-research", 10).allowed)

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert allowed.count(True) == 10
    assert allowed.count(False) == 10
