"""
Process-wide request budget for the /api routes.

One instance is created at startup and shared through ``app.state``. Counting is
done by a ``limits`` fixed-window strategy under a single key, so every client
draws from the same budget. The scheduler also calls ``reset()`` on every window
boundary.
"""
from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter

API_KEY = "vendor-intake-api"


class RateLimiter:
    """Fixed-window request counter over a ``limits`` storage backend"""

    def __init__(self, max_requests: int, window_seconds: int, storage_uri: str = "memory://"):
        self.max_requests = max_requests
        self.window_seconds = max(int(window_seconds), 1)
        self._item = RateLimitItemPerSecond(max_requests, self.window_seconds)
        self._storage = storage_from_string(storage_uri)
        self._strategy = FixedWindowRateLimiter(self._storage)

    def hit(self) -> bool:
        """Count one request; False when the window's budget is spent"""
        return self._strategy.hit(self._item, API_KEY)

    def reset(self) -> None:
        self._storage.reset()

    @property
    def remaining(self) -> int:
        return self._strategy.get_window_stats(self._item, API_KEY).remaining
