"""Schemas related to proof-of-work challenges."""
from __future__ import annotations

from pydantic import BaseModel


class ChallengeOut(BaseModel):
    """API response payload for issuing a proof-of-work challenge."""

    nonce: str
    difficulty: int
    expires_in_seconds: int
    hint: str
    example: str
