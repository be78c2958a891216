"""Per-client rate limiting for wall posts.

Two rules apply to every client key: a cooldown between consecutive accepted
posts, and a cap on posts per hourly window. The window is rolled forward
lazily on the first check after it expires. State is process-local; clients
behind one address, or without one, share a bucket.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from threading import Lock

from forever_wall.core.settings import settings

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

Clock = Callable[[], float]


@dataclass
class RateLimitRecord:
    """Mutable counters for one client key."""

    client_key: str
    window_count: int
    window_reset_at: float
    last_post_at: float


@dataclass(frozen=True)
class Allowed:
    """The post may proceed; the client's counters have been updated."""

    remaining: int

    allowed = True


@dataclass(frozen=True)
class Denied:
    """The post is refused; the client should retry after the given delay."""

    reason: str
    retry_after_seconds: int

    allowed = False


Decision = Allowed | Denied


class RateLimiter:
    """In-memory rate limiter keyed by client address."""

    def __init__(
        self,
        *,
        max_posts_per_hour: int = settings.rate_limit_max_per_hour,
        cooldown_seconds: int = settings.rate_limit_cooldown_seconds,
        window_seconds: int = settings.rate_limit_window_seconds,
        clock: Clock = time.time,
    ) -> None:
        self.max_posts_per_hour = max_posts_per_hour
        self.cooldown_seconds = cooldown_seconds
        self.window_seconds = window_seconds
        self._clock = clock
        self._records: dict[str, RateLimitRecord] = {}
        self._lock = Lock()

    def check_and_consume(self, client_key: str, now: float | None = None) -> Decision:
        """Admit or refuse a post from ``client_key`` and record an admitted one."""
        current = self._clock() if now is None else now
        with self._lock:
            record = self._records.get(client_key)
            if record is None:
                self._records[client_key] = RateLimitRecord(
                    client_key=client_key,
                    window_count=1,
                    window_reset_at=current + self.window_seconds,
                    last_post_at=current,
                )
                return Allowed(remaining=self.max_posts_per_hour - 1)

            elapsed = current - record.last_post_at
            if elapsed < self.cooldown_seconds:
                return Denied(
                    reason=(
                        f"Slow down! Please wait {self.cooldown_seconds} seconds "
                        "between posts."
                    ),
                    retry_after_seconds=math.ceil(self.cooldown_seconds - elapsed),
                )

            if current > record.window_reset_at:
                record.window_count = 0
                record.window_reset_at = current + self.window_seconds

            if record.window_count >= self.max_posts_per_hour:
                minutes = math.ceil((record.window_reset_at - current) / 60)
                return Denied(
                    reason=(
                        f"Rate limit exceeded: {self.max_posts_per_hour} posts per hour. "
                        f"Try again in {minutes} minutes."
                    ),
                    retry_after_seconds=minutes * 60,
                )

            record.window_count += 1
            record.last_post_at = current
            return Allowed(remaining=self.max_posts_per_hour - record.window_count)

    def remaining(self, client_key: str, now: float | None = None) -> int:
        """Return how many posts ``client_key`` has left in its current window."""
        current = self._clock() if now is None else now
        with self._lock:
            record = self._records.get(client_key)
            if record is None or current > record.window_reset_at:
                return self.max_posts_per_hour
            return max(0, self.max_posts_per_hour - record.window_count)

    def sweep(self, now: float | None = None) -> int:
        """Evict records whose window has elapsed and that were idle for a window."""
        current = self._clock() if now is None else now
        idle_before = current - self.window_seconds
        with self._lock:
            stale = [
                key
                for key, record in self._records.items()
                if record.window_reset_at < current and record.last_post_at < idle_before
            ]
            for key in stale:
                del self._records[key]
        if stale:
            logger.debug("Evicted %d idle rate-limit records", len(stale))
        return len(stale)

    def get(self, client_key: str) -> RateLimitRecord | None:
        with self._lock:
            record = self._records.get(client_key)
            return None if record is None else RateLimitRecord(**vars(record))

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def client_key_from_request(headers: Mapping[str, str], client_host: str | None) -> str:
    """Derive the rate-limit key for a request.

    Uses the first ``X-Forwarded-For`` entry, then ``X-Real-IP``, then the
    peer address, then ``"unknown"``.
    """
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return real_ip
    if client_host:
        return client_host
    return UNKNOWN_CLIENT
