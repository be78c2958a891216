# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_AUTO_CREATE", "false")

from forever_wall.core.settings import Settings
from forever_wall.db.session import Base
from forever_wall.main import app as fastapi_app
from forever_wall.repositories.message_repo import MessageRepository
from forever_wall.services.broadcaster import RealtimeBroadcaster
from forever_wall.services.challenges import ChallengeIssuer, InMemoryChallengeStore
from forever_wall.services.gateway import AdmissionGateway
from forever_wall.services.message_store import MessageStore
from forever_wall.services.rate_limit import RateLimiter
from forever_wall.utils.pow_client import solve

TEST_DB_URL = "sqlite://"
TEST_DIFFICULTY = 3
START_TIME = 1_700_000_000.0


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, now: float = START_TIME) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now


class Ticker:
    """Return strictly increasing UTC datetimes, one second apart."""

    def __init__(self) -> None:
        self._current = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self._current += timedelta(seconds=1)
        return self._current


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> Iterator[sessionmaker[Session]]:
    factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    try:
        yield factory
    finally:
        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def test_settings() -> Settings:
    """Settings with a low difficulty so tests can solve challenges quickly."""
    return Settings(
        pow_difficulty=TEST_DIFFICULTY,
        database_auto_create=False,
        challenge_backend="memory",
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def message_store(session_factory: sessionmaker[Session]) -> MessageStore:
    return MessageStore(MessageRepository(session_factory), now=Ticker())


@pytest.fixture()
def gateway(
    test_settings: Settings,
    message_store: MessageStore,
    clock: FakeClock,
) -> AdmissionGateway:
    return AdmissionGateway(
        message_store,
        config=test_settings,
        issuer=ChallengeIssuer(
            InMemoryChallengeStore(),
            difficulty=test_settings.pow_difficulty,
            ttl_seconds=test_settings.challenge_ttl_seconds,
            clock=clock,
        ),
        limiter=RateLimiter(clock=clock),
        broadcaster=RealtimeBroadcaster(queue_size=10),
        clock=clock,
    )


@pytest.fixture()
def app(gateway: AdmissionGateway) -> Iterator[FastAPI]:
    fastapi_app.state.gateway = gateway
    try:
        yield fastapi_app
    finally:
        fastapi_app.state.gateway = None


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def solved() -> Callable[[str], str]:
    """Return a helper that solves a nonce at the test difficulty."""

    def _solve(nonce: str, difficulty: int = TEST_DIFFICULTY) -> str:
        solution = solve(nonce, difficulty, max_attempts=5_000_000)
        assert solution is not None, "Failed to find a proof-of-work solution"
        return solution

    return _solve


@pytest.fixture()
def post_body(solved: Callable[[str], str]) -> Callable[..., dict[str, Any]]:
    """Build a valid POST /wall body for ``message``."""

    def _build(message: str, nonce: str = "abc123") -> dict[str, Any]:
        return {"message": message, "nonce": nonce, "solution": solved(nonce)}

    return _build
