"""Tests for the challenge endpoint."""

from __future__ import annotations

from unittest.mock import MagicMock

import redis
from fastapi.testclient import TestClient

from forever_wall.services.challenges import ChallengeIssuer, RedisChallengeStore
from forever_wall.services.gateway import AdmissionGateway


def test_get_challenge_returns_fresh_nonce(client: TestClient, gateway: AdmissionGateway) -> None:
    response = client.get("/challenge")

    assert response.status_code == 200
    data = response.json()
    assert len(data["nonce"]) == 32
    assert data["difficulty"] == gateway.config.pow_difficulty
    assert data["expires_in_seconds"] == 300
    assert str(data["difficulty"]) in data["hint"]
    assert data["nonce"] in data["example"]
    assert '"' + "0" * data["difficulty"] + '"' in data["example"]


def test_each_request_issues_a_new_tracked_challenge(
    client: TestClient,
    gateway: AdmissionGateway,
) -> None:
    nonces = {client.get("/challenge").json()["nonce"] for _ in range(5)}

    assert len(nonces) == 5
    assert len(gateway.issuer.store) == 5


def test_challenge_reports_unreachable_store(
    client: TestClient,
    gateway: AdmissionGateway,
) -> None:
    redis_client = MagicMock()
    redis_client.set.side_effect = redis.ConnectionError("connection refused")
    gateway.issuer = ChallengeIssuer(RedisChallengeStore(redis_client), clock=gateway.clock)

    response = client.get("/challenge")

    assert response.status_code == 500
    assert response.headers["content-type"].startswith("application/json")
    assert response.json() == {"success": False, "error": "Challenge store unavailable"}


def test_challenge_reports_time_left_on_the_clock(
    client: TestClient,
    gateway: AdmissionGateway,
) -> None:
    gateway.issuer.ttl_seconds = 120
    assert client.get("/challenge").json()["expires_in_seconds"] == 120
