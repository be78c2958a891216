"""Proof-of-work challenge issuance and tracking.

Challenges live in a ``ChallengeStore``. The in-memory store suits a single
process; the Redis store lets several instances share issued challenges and
relies on Redis key expiry instead of the periodic sweep.

Verification does not consult this store unless the service is configured
with ``POW_REQUIRE_ISSUED_CHALLENGE``; by default any client-supplied nonce is
accepted by the write path.
"""

from __future__ import annotations

import json
import logging
import secrets
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from threading import Lock
from typing import Any, Protocol

import redis

from forever_wall.core.errors import ConfigurationError
from forever_wall.core.settings import Settings, settings

logger = logging.getLogger(__name__)

NONCE_BYTES = 16
_REDIS_KEY_PREFIX = "wall:challenge:"
STORE_UNAVAILABLE_TEXT = "Challenge store unavailable"

Clock = Callable[[], float]


@dataclass(frozen=True)
class Challenge:
    """An issued proof-of-work challenge. Timestamps are epoch seconds."""

    nonce: str
    difficulty: int
    issued_at: float
    expires_at: float

    def is_live(self, now: float) -> bool:
        return now <= self.expires_at

    def seconds_remaining(self, now: float) -> int:
        return max(0, int(self.expires_at - now))


class ChallengeStore(Protocol):
    """Storage contract for live challenges."""

    def add(self, challenge: Challenge) -> bool:
        """Store ``challenge``; return False if its nonce is already live."""

    def pop(self, nonce: str) -> Challenge | None:
        """Remove and return the challenge for ``nonce`` if present."""

    def remove_expired(self, now: float) -> int:
        """Drop challenges that expired before ``now``; return how many."""

    def __len__(self) -> int: ...


class InMemoryChallengeStore:
    """Process-local challenge store guarded by a lock."""

    def __init__(self) -> None:
        self._challenges: dict[str, Challenge] = {}
        self._lock = Lock()

    def add(self, challenge: Challenge) -> bool:
        with self._lock:
            if challenge.nonce in self._challenges:
                return False
            self._challenges[challenge.nonce] = challenge
            return True

    def pop(self, nonce: str) -> Challenge | None:
        with self._lock:
            return self._challenges.pop(nonce, None)

    def remove_expired(self, now: float) -> int:
        with self._lock:
            expired = [
                nonce
                for nonce, challenge in self._challenges.items()
                if challenge.expires_at < now
            ]
            for nonce in expired:
                del self._challenges[nonce]
            return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._challenges.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._challenges)


class RedisChallengeStore:
    """Challenge store shared between instances through Redis.

    Keys carry a TTL equal to the challenge lifetime so Redis evicts them on
    its own; ``remove_expired`` therefore has nothing to do.

    Client failures surface as ``ConfigurationError``.
    """

    def __init__(self, client: Any) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> RedisChallengeStore:
        return cls(redis.from_url(url))  # type: ignore[no-untyped-call]

    def add(self, challenge: Challenge) -> bool:
        ttl = max(1, int(challenge.expires_at - challenge.issued_at))
        try:
            stored = self._redis.set(
                f"{_REDIS_KEY_PREFIX}{challenge.nonce}",
                json.dumps(asdict(challenge)),
                ex=ttl,
                nx=True,
            )
        except redis.RedisError as exc:
            logger.error("Redis unavailable while storing challenge: %s", exc)
            raise ConfigurationError(STORE_UNAVAILABLE_TEXT) from exc
        return bool(stored)

    def pop(self, nonce: str) -> Challenge | None:
        try:
            raw = self._redis.getdel(f"{_REDIS_KEY_PREFIX}{nonce}")
        except redis.RedisError as exc:
            logger.error("Redis unavailable while consuming challenge: %s", exc)
            raise ConfigurationError(STORE_UNAVAILABLE_TEXT) from exc
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return Challenge(**json.loads(raw))

    def remove_expired(self, now: float) -> int:
        return 0

    def __len__(self) -> int:
        try:
            return sum(1 for _ in self._redis.scan_iter(match=f"{_REDIS_KEY_PREFIX}*"))
        except redis.RedisError as exc:
            raise ConfigurationError(STORE_UNAVAILABLE_TEXT) from exc


class ChallengeIssuer:
    """Issue proof-of-work challenges and track the live ones."""

    def __init__(
        self,
        store: ChallengeStore | None = None,
        *,
        difficulty: int = settings.pow_difficulty,
        ttl_seconds: int = settings.challenge_ttl_seconds,
        clock: Clock = time.time,
    ) -> None:
        self._store = store if store is not None else InMemoryChallengeStore()
        self.difficulty = difficulty
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def store(self) -> ChallengeStore:
        return self._store

    def issue(self, now: float | None = None) -> Challenge:
        """Create, record and return a fresh challenge.

        Raises:
            ConfigurationError: If the challenge store cannot be reached.
        """
        issued_at = self._clock() if now is None else now
        while True:
            challenge = Challenge(
                nonce=secrets.token_hex(NONCE_BYTES),
                difficulty=self.difficulty,
                issued_at=issued_at,
                expires_at=issued_at + self.ttl_seconds,
            )
            if self._store.add(challenge):
                return challenge
            logger.warning("Nonce collision while issuing challenge; regenerating")

    def consume(self, nonce: str, now: float | None = None) -> Challenge | None:
        """Remove ``nonce`` from the live set; return it only if unexpired.

        Raises:
            ConfigurationError: If the challenge store cannot be reached.
        """
        current = self._clock() if now is None else now
        challenge = self._store.pop(nonce)
        if challenge is None or not challenge.is_live(current):
            return None
        return challenge

    def sweep_expired(self, now: float | None = None) -> int:
        """Evict every challenge whose expiry has passed."""
        current = self._clock() if now is None else now
        removed = self._store.remove_expired(current)
        if removed:
            logger.debug("Evicted %d expired challenges", removed)
        return removed


def build_challenge_store(config: Settings = settings) -> ChallengeStore:
    """Return the challenge store selected by ``CHALLENGE_BACKEND``."""
    if config.challenge_backend == "redis":
        logger.info("Using Redis challenge store at %s", config.redis_url)
        return RedisChallengeStore.from_url(config.redis_url)
    return InMemoryChallengeStore()
