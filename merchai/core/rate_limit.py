"""
Rate limiting module for per-session request throttling.
Keeps a sliding window of request timestamps per key, in memory.

This protects the user's own generation quota and cost. It is not a
security boundary: state lives in the process and is gone on restart.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from merchai.config import logger


@dataclass(frozen=True)
class RateLimitConfig:
    max_requests: int
    window_ms: int

    def __post_init__(self):
        if self.max_requests <= 0:
            raise ValueError("max_requests must be greater than 0")
        if self.window_ms <= 0:
            raise ValueError("window_ms must be greater than 0")


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    remaining: int
    limit: int
    retry_after_ms: int


RATE_LIMITS: Dict[str, RateLimitConfig] = {
    "login": RateLimitConfig(max_requests=5, window_ms=15 * 60 * 1000),
    "mockup_generation": RateLimitConfig(max_requests=10, window_ms=60 * 1000),
    "mockup_edit": RateLimitConfig(max_requests=20, window_ms=60 * 1000),
    "mockup_export": RateLimitConfig(max_requests=30, window_ms=60 * 1000),
    "api_call": RateLimitConfig(max_requests=100, window_ms=60 * 1000),
}


def _now_ms() -> float:
    return time.time() * 1000


class RateLimiter:
    """
    Sliding-window request counter keyed by an arbitrary string.

    A denied attempt is not recorded, so rejected calls do not push the
    window further out.

    Args:
        clock: Returns the current time in milliseconds. Defaults to wall clock.
    """

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._clock = clock or _now_ms
        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def _recent(self, key: str, config: RateLimitConfig, now: float) -> List[float]:
        return [
            timestamp
            for timestamp in self._requests.get(key, [])
            if now - timestamp < config.window_ms
        ]

    def is_allowed(self, key: str, config: RateLimitConfig) -> bool:
        """Record a request for ``key`` and return True, or return False if the window is full."""
        with self._lock:
            now = self._clock()
            recent = self._recent(key, config, now)

            if len(recent) >= config.max_requests:
                logger.debug(
                    "Rate limit denied",
                    extra={"rate_key": key, "in_window": len(recent)},
                )
                return False

            recent.append(now)
            self._requests[key] = recent
            return True

    def get_remaining(self, key: str, config: RateLimitConfig) -> int:
        with self._lock:
            recent = self._recent(key, config, self._clock())
        return max(0, config.max_requests - len(recent))

    def get_status(self, key: str, config: RateLimitConfig) -> RateLimitStatus:
        """Report the current window for ``key`` without recording a request."""
        with self._lock:
            now = self._clock()
            recent = self._recent(key, config, now)

        remaining = max(0, config.max_requests - len(recent))
        retry_after_ms = 0
        if remaining == 0 and recent:
            retry_after_ms = max(0, int(config.window_ms - (now - min(recent))))

        return RateLimitStatus(
            allowed=remaining > 0,
            remaining=remaining,
            limit=config.max_requests,
            retry_after_ms=retry_after_ms,
        )

    def reset(self, key: str) -> None:
        with self._lock:
            self._requests.pop(key, None)

    def clear(self) -> None:
        """Drop every key. Called when the owning session is torn down."""
        with self._lock:
            self._requests.clear()


__all__ = ["RateLimitConfig", "RateLimitStatus", "RateLimiter", "RATE_LIMITS"]
