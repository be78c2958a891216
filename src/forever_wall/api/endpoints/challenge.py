"""Proof-of-work challenge endpoint.

Issued challenges are recorded so they can be swept, and consumed when
``POW_REQUIRE_ISSUED_CHALLENGE`` is enabled; otherwise the write path accepts
any nonce whose solution meets the difficulty.
"""
from __future__ import annotations

from fastapi import APIRouter

from forever_wall.api.dependencies import GatewayDep
from forever_wall.schemas.challenge import ChallengeOut

router = APIRouter(tags=["challenge"])


@router.get("/challenge", response_model=ChallengeOut)
async def get_challenge(gateway: GatewayDep) -> ChallengeOut:
    """Issue a proof-of-work challenge for a client to solve.

    Returns:
        A `ChallengeOut` payload with the nonce, difficulty and solving hints.
    """
    challenge = gateway.issue_challenge()
    algorithm = gateway.config.pow_hash_algorithm.upper()
    zeros = "0" * challenge.difficulty
    return ChallengeOut(
        nonce=challenge.nonce,
        difficulty=challenge.difficulty,
        expires_in_seconds=challenge.seconds_remaining(gateway.clock()),
        hint=(
            f"Find a solution string where {algorithm}(nonce + solution) "
            f"starts with {challenge.difficulty} zeros"
        ),
        example=f'{algorithm}("{challenge.nonce}" + "your_solution") must start with "{zeros}"',
    )
