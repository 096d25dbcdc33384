"""Sliding window rate limiter for inbound operations."""

import time
from collections import defaultdict
from dataclasses import dataclass, field


@dataclass
class RateLimiterConfig:
    """Configuration for rate limiter. ``max_requests <= 0`` disables limiting."""

    max_requests: int
    window_seconds: float = 60.0


@dataclass
class RateLimiter:
    """Sliding window rate limiter keyed by participant id.

    No lock: callers all run on the event loop and ``is_allowed`` never awaits.

    Example:
        limiter = RateLimiter(RateLimiterConfig(max_requests=600))
        if not limiter.is_allowed(participant_id):
            return  # drop the event
    """

    config: RateLimiterConfig
    _timestamps: dict[str, list[float]] = field(default_factory=lambda: defaultdict(list))

    @property
    def enabled(self) -> bool:
        return self.config.max_requests > 0

    def is_allowed(self, key: str, now: float | None = None) -> bool:
        """Check if an event is allowed and record it if so.

        Args:
            key: Identifier for the rate limit bucket (participant id)
            now: Current timestamp (defaults to time.monotonic(), injectable for testing)
        """
        if not self.enabled:
            return True
        if now is None:
            now = time.monotonic()

        window_start = now - self.config.window_seconds
        timestamps = [t for t in self._timestamps[key] if t > window_start]
        self._timestamps[key] = timestamps

        if len(timestamps) >= self.config.max_requests:
            return False

        timestamps.append(now)
        return True

    def remaining(self, key: str, now: float | None = None) -> int:
        """Events still allowed in the current window."""
        if now is None:
            now = time.monotonic()
        window_start = now - self.config.window_seconds
        current_count = sum(1 for t in self._timestamps.get(key, []) if t > window_start)
        return max(0, self.config.max_requests - current_count)

    def reset(self, key: str) -> None:
        """Forget a key, e.g. when its participant disconnects."""
        self._timestamps.pop(key, None)

    def reset_all(self) -> None:
        self._timestamps.clear()
