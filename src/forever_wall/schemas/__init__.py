"""Pydantic schemas for the Forever Wall API."""

from .challenge import ChallengeOut
from .wall import (
    MessageOut,
    Position,
    RateLimitPolicy,
    RateLimitStatus,
    WallListOut,
    WallPostData,
    WallPostOut,
)

__all__ = [
    "ChallengeOut",
    "MessageOut",
    "Position",
    "RateLimitPolicy",
    "RateLimitStatus",
    "WallListOut",
    "WallPostData",
    "WallPostOut",
]
