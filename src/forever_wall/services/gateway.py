"""Admission gateway: the write path of the wall.

A post moves through a fixed sequence of gates::

    Received -> RateLimitChecked -> Validated -> ProofVerified
             -> Persisted -> Broadcast -> Responded

Each gate returns ``Ok`` or ``Err``; the first ``Err`` ends the request and
nothing after it runs, so a rejected post never reaches the message store.
The gateway also owns the process-scoped admission state (live challenges,
rate-limit records) and its background maintenance.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from forever_wall.core import pow as core_pow
from forever_wall.core.errors import (
    ProofOfWorkError,
    RateLimitError,
    ValidationError,
    WallError,
)
from forever_wall.core.result import Err, Ok, Result
from forever_wall.core.settings import Settings, settings
from forever_wall.models.message import Message
from forever_wall.repositories.message_repo import MessageRepository, SortOrder
from forever_wall.schemas.wall import MessageOut
from forever_wall.services.broadcaster import RealtimeBroadcaster
from forever_wall.services.challenges import (
    Challenge,
    ChallengeIssuer,
    build_challenge_store,
)
from forever_wall.services.maintenance import MaintenanceWorker
from forever_wall.services.message_store import MessageStore, normalize_text
from forever_wall.services.rate_limit import Denied, RateLimiter

logger = logging.getLogger(__name__)

POW_REQUIRED_TEXT = "Proof of work required. Get a challenge from GET /challenge first."


@dataclass(frozen=True)
class Submission:
    """A decoded and validated post request."""

    message: str
    nonce: str
    solution: str


@dataclass(frozen=True)
class Accepted:
    """Outcome of a post that passed every gate."""

    message: Message
    remaining_posts: int


class AdmissionGateway:
    """Sequence rate limiting, validation, proof-of-work and persistence."""

    def __init__(
        self,
        store: MessageStore,
        *,
        config: Settings = settings,
        issuer: ChallengeIssuer | None = None,
        limiter: RateLimiter | None = None,
        broadcaster: RealtimeBroadcaster | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config
        self.store = store
        self.clock = clock
        self.issuer = issuer or ChallengeIssuer(
            build_challenge_store(config),
            difficulty=config.pow_difficulty,
            ttl_seconds=config.challenge_ttl_seconds,
            clock=clock,
        )
        self.limiter = limiter or RateLimiter(
            max_posts_per_hour=config.rate_limit_max_per_hour,
            cooldown_seconds=config.rate_limit_cooldown_seconds,
            window_seconds=config.rate_limit_window_seconds,
            clock=clock,
        )
        self.broadcaster = broadcaster or RealtimeBroadcaster(config.stream_queue_size)
        self.maintenance = MaintenanceWorker(
            self.issuer,
            self.limiter,
            config.maintenance_interval_seconds,
        )

    @classmethod
    def from_session_factory(
        cls,
        session_factory: sessionmaker[Session],
        config: Settings = settings,
        **kwargs: Any,
    ) -> AdmissionGateway:
        """Build a gateway backed by a SQLAlchemy session factory."""
        store = MessageStore(
            MessageRepository(session_factory),
            max_length=config.message_max_length,
            default_limit=config.wall_default_limit,
            max_limit=config.wall_max_limit,
        )
        return cls(store, config=config, **kwargs)

    # --- Lifecycle -----------------------------------------------------------------
    async def start(self) -> None:
        """Start periodic sweeps of challenges and rate-limit records."""
        await self.maintenance.start()

    async def stop(self) -> None:
        """Stop maintenance, end realtime streams and drop process-local state."""
        await self.maintenance.stop()
        self.broadcaster.close()
        clear = getattr(self.issuer.store, "clear", None)
        if clear is not None:
            clear()

    # --- Challenges ----------------------------------------------------------------
    def issue_challenge(self) -> Challenge:
        """Issue a fresh proof-of-work challenge."""
        return self.issuer.issue()

    # --- Write path ----------------------------------------------------------------
    async def submit(self, client_key: str, raw_body: bytes) -> Result[Accepted]:
        """Run a post through every gate and return the outcome."""
        received = self._receive(raw_body)
        if isinstance(received, Err):
            return self._reject(client_key, received)

        decision = self.limiter.check_and_consume(client_key)
        if isinstance(decision, Denied):
            return self._reject(
                client_key,
                Err(RateLimitError(decision.reason, decision.retry_after_seconds)),
            )

        validated = self._validate(received.value)
        if isinstance(validated, Err):
            return self._reject(client_key, validated)
        submission = validated.value

        verified = self._verify(submission)
        if isinstance(verified, Err):
            return self._reject(client_key, verified)

        persisted = await self._persist(submission)
        if isinstance(persisted, Err):
            return self._reject(client_key, persisted)
        message = persisted.value

        self.broadcaster.publish(MessageOut.from_message(message).model_dump(mode="json"))
        logger.info("Accepted post %s from %s", message.id, client_key)
        return Ok(Accepted(message=message, remaining_posts=decision.remaining))

    def _receive(self, raw_body: bytes) -> Result[dict[str, Any]]:
        try:
            body = json.loads(raw_body)
        except (ValueError, UnicodeDecodeError):
            return Err(ValidationError("Invalid request"))
        if not isinstance(body, dict):
            return Err(ValidationError("Invalid request"))
        return Ok(body)

    def _validate(self, body: dict[str, Any]) -> Result[Submission]:
        try:
            text = normalize_text(body.get("message"), self.config.message_max_length)
        except ValidationError as exc:
            return Err(exc)
        nonce = body.get("nonce")
        solution = body.get("solution")
        if not isinstance(nonce, str) or not nonce:
            return Err(ValidationError(POW_REQUIRED_TEXT))
        if not isinstance(solution, str) or not solution:
            return Err(ValidationError(POW_REQUIRED_TEXT))
        return Ok(Submission(message=text, nonce=nonce, solution=solution))

    def _verify(self, submission: Submission) -> Result[Submission]:
        difficulty = self.config.pow_difficulty
        algorithm = self.config.pow_hash_algorithm
        if not core_pow.verify(submission.nonce, submission.solution, difficulty, algorithm):
            return Err(
                ProofOfWorkError(
                    "Invalid proof of work",
                    hint=core_pow.describe_attempt(
                        submission.nonce, submission.solution, difficulty, algorithm
                    ),
                )
            )
        if self.config.pow_require_issued_challenge:
            try:
                challenge = self.issuer.consume(submission.nonce)
            except WallError as exc:
                return Err(exc)
            if challenge is None:
                return Err(
                    ProofOfWorkError(
                        "Unknown or expired challenge. Get a fresh one from GET /challenge."
                    )
                )
        return Ok(submission)

    async def _persist(self, submission: Submission) -> Result[Message]:
        try:
            message = await asyncio.to_thread(self.store.append, submission.message)
        except WallError as exc:
            return Err(exc)
        return Ok(message)

    def _reject(self, client_key: str, err: Err) -> Err:
        logger.info("Rejected post from %s (%s): %s", client_key, err.kind, err.error.message)
        return err

    # --- Read path -----------------------------------------------------------------
    async def read(
        self,
        limit: int | None = None,
        order: SortOrder = "desc",
    ) -> Result[list[Message]]:
        """Return the most recent messages, newest first by default."""
        try:
            messages = await asyncio.to_thread(self.store.list, limit, order)
        except WallError as exc:
            logger.warning("Wall read failed (%s): %s", exc.kind, exc.message)
            return Err(exc)
        return Ok(messages)
