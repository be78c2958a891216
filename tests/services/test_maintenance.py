"""Tests for the background sweep worker."""

from __future__ import annotations

import asyncio

import pytest

from forever_wall.services.challenges import ChallengeIssuer, InMemoryChallengeStore
from forever_wall.services.maintenance import MaintenanceWorker
from forever_wall.services.rate_limit import RateLimiter

NOW = 1_700_000_000.0


def _components(now: list[float]) -> tuple[ChallengeIssuer, RateLimiter]:
    issuer = ChallengeIssuer(
        InMemoryChallengeStore(), difficulty=5, ttl_seconds=300, clock=lambda: now[0]
    )
    limiter = RateLimiter(clock=lambda: now[0])
    return issuer, limiter


def test_sweep_once_runs_both_sweeps() -> None:
    now = [NOW]
    issuer, limiter = _components(now)
    issuer.issue()
    limiter.check_and_consume("1.2.3.4")

    now[0] += 2 * 3600
    worker = MaintenanceWorker(issuer, limiter, interval_seconds=60)

    assert worker.sweep_once() == (1, 1)
    assert len(issuer.store) == 0
    assert len(limiter) == 0


@pytest.mark.asyncio
async def test_worker_sweeps_periodically_until_stopped() -> None:
    now = [NOW]
    issuer, limiter = _components(now)
    worker = MaintenanceWorker(issuer, limiter, interval_seconds=0.01)

    await worker.start()
    assert worker.running
    issuer.issue()
    now[0] += 301
    for _ in range(100):
        if len(issuer.store) == 0:
            break
        await asyncio.sleep(0.01)

    await worker.stop()

    assert len(issuer.store) == 0
    assert not worker.running


@pytest.mark.asyncio
async def test_worker_survives_failing_sweep(monkeypatch) -> None:
    now = [NOW]
    issuer, limiter = _components(now)
    worker = MaintenanceWorker(issuer, limiter, interval_seconds=0.01)
    calls = []

    def _boom(current: float | None = None) -> int:
        calls.append(current)
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(issuer, "sweep_expired", _boom)

    await worker.start()
    for _ in range(100):
        if len(calls) >= 2:
            break
        await asyncio.sleep(0.01)
    await worker.stop()

    assert len(calls) >= 2


@pytest.mark.asyncio
async def test_stop_without_start_is_noop() -> None:
    issuer, limiter = _components([NOW])
    worker = MaintenanceWorker(issuer, limiter, interval_seconds=60)
    await worker.stop()
    assert not worker.running
