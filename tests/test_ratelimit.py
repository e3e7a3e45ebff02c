"""Unit tests for the in-memory sliding-window limiter."""
from datetime import datetime, timedelta, timezone

from app.routevault.ratelimit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


def test_default_clock_is_timezone_aware():
    limiter = RateLimiter(1, 60)
    assert limiter._clock().tzinfo is not None


def test_window_slides():
    clock = FakeClock()
    limiter = RateLimiter(2, 60, clock=clock)
    assert limiter.hit("1.2.3.4")
    assert limiter.hit("1.2.3.4")
    assert not limiter.hit("1.2.3.4")
    assert limiter.hit("5.6.7.8")

    clock.advance(61)
    assert limiter.hit("1.2.3.4")


def test_idle_clients_are_evicted():
    clock = FakeClock()
    limiter = RateLimiter(5, 60, clock=clock)
    for i in range(50):
        limiter.hit(f"10.0.0.{i}")
    assert limiter.tracked_clients() == 50

    clock.advance(30)
    limiter.hit("10.0.0.0")
    assert limiter.tracked_clients() == 50

    clock.advance(45)
    limiter.hit("192.168.0.1")
    # 10.0.0.0 hit 45s ago is still inside the window
    assert limiter.tracked_clients() == 2

    clock.advance(120)
    limiter.hit("192.168.0.2")
    assert limiter.tracked_clients() == 1
