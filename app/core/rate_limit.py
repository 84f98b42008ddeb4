"""
Login attempt throttling on top of the limits library (the counter layer slowapi uses).

Keyed by (email, client identity); moving window, so only attempts in the trailing
window count. Every attempt consumes a slot, successful or not. The storage is
chosen by RATE_LIMIT_STORAGE_URI (memory:// per process, redis:// when shared)
and the limiter is handed out as a FastAPI dependency so tests can reset or swap it.
"""

import logging
import math
import time
from functools import lru_cache

from limits import RateLimitItemPerMinute
from limits.storage import Storage, storage_from_string
from limits.strategies import MovingWindowRateLimiter

from app.core.config import get_settings
from app.core.errors import RateLimitError

logger = logging.getLogger(__name__)

LOGIN_NAMESPACE = "login"


class LoginRateLimiter:
    """At most `attempts` login attempts per (email, client) within `window_minutes`."""

    def __init__(self, storage: Storage, attempts: int, window_minutes: int) -> None:
        self._storage = storage
        self._item = RateLimitItemPerMinute(attempts, window_minutes)
        self._limiter = MovingWindowRateLimiter(storage)
        self.window_minutes = window_minutes

    def check(self, email: str, client_id: str) -> None:
        """Record one attempt for the key; raise RateLimitError once the window is full."""
        if self._limiter.hit(self._item, LOGIN_NAMESPACE, email, client_id):
            return
        reset_time, _remaining = self._limiter.get_window_stats(
            self._item, LOGIN_NAMESPACE, email, client_id
        )
        retry_after = max(1, math.ceil(reset_time - time.time()))
        logger.warning("Login rate limit hit for client=%s retry_after=%ss", client_id, retry_after)
        raise RateLimitError(
            f"Too many login attempts. Try again later after {self.window_minutes} mins.",
            retry_after=retry_after,
        )

    def storage_available(self) -> bool:
        try:
            return bool(self._storage.check())
        except Exception:
            return False

    def reset(self) -> None:
        """Forget all counters (tests, or an operator clearing a lockout)."""
        self._storage.reset()


@lru_cache
def get_login_rate_limiter() -> LoginRateLimiter:
    """Dependency: process-wide limiter built from settings."""
    s = get_settings()
    return LoginRateLimiter(
        storage_from_string(s.RATE_LIMIT_STORAGE_URI),
        attempts=s.LOGIN_RATE_LIMIT_ATTEMPTS,
        window_minutes=s.LOGIN_RATE_LIMIT_WINDOW_MINUTES,
    )
