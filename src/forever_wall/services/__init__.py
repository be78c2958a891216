"""Service layer for Forever Wall."""

from .broadcaster import RealtimeBroadcaster
from .challenges import Challenge, ChallengeIssuer
from .gateway import AdmissionGateway
from .message_store import MessageStore
from .rate_limit import RateLimiter

__all__ = [
    "AdmissionGateway",
    "Challenge",
    "ChallengeIssuer",
    "MessageStore",
    "RateLimiter",
    "RealtimeBroadcaster",
]
