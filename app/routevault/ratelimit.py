from __future__ import annotations

import threading
from collections import defaultdict
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from flask import Flask, request

from app.routevault.errors import RateLimited


class RateLimiter:
    """Sliding-window counter per client key, kept in process memory."""

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        message: str = "Too many requests",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.limit = limit
        self.window = timedelta(seconds=window_seconds)
        self.message = message
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._attempts: dict[str, list[datetime]] = defaultdict(list)
        self._last_sweep = self._clock()
        self._lock = threading.Lock()

    def _sweep(self, now: datetime) -> None:
        """Drop clients with no hit inside the window; runs at most once per window."""
        if now - self._last_sweep < self.window:
            return
        cutoff = now - self.window
        for key in [k for k, hits in self._attempts.items() if not hits or hits[-1] <= cutoff]:
            del self._attempts[key]
        self._last_sweep = now

    def hit(self, key: str) -> bool:
        """Record one request for `key`; False once the window is already full."""
        now = self._clock()
        cutoff = now - self.window
        with self._lock:
            self._sweep(now)
            recent = [t for t in self._attempts[key] if t > cutoff]
            if len(recent) >= self.limit:
                self._attempts[key] = recent
                return False
            recent.append(now)
            self._attempts[key] = recent
            return True

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._attempts)

    def reset(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._attempts.clear()
            else:
                self._attempts.pop(key, None)


def init_rate_limits(app: Flask) -> None:
    window = int(app.config["RATE_LIMIT_WINDOW_SECONDS"])
    general = RateLimiter(int(app.config["RATE_LIMIT_GENERAL"]), window, "Too many requests")
    login = RateLimiter(int(app.config["RATE_LIMIT_LOGIN"]), window, "Too many login attempts")
    app.extensions["rate_limiters"] = {"general": general, "login": login}

    @app.before_request
    def _rate_limit_guard():
        if not request.path.startswith("/api/"):
            return None
        ip = request.remote_addr or "unknown"
        if not general.hit(ip):
            raise RateLimited(general.message)
        if request.path == "/api/login" and request.method == "POST" and not login.hit(ip):
            raise RateLimited(login.message)
        return None
