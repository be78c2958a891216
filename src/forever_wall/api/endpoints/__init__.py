"""API endpoint modules."""

from .challenge import router as challenge_router
from .system import router as system_router
from .wall import router as wall_router

__all__ = [
    "challenge_router",
    "system_router",
    "wall_router",
]
