"""Service information endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from forever_wall.core.settings import settings

router = APIRouter(tags=["system"])


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "An append-only wall for anonymous writers, gated by proof-of-work",
        "challenge": "GET /challenge",
        "read": "GET /wall",
        "write": "POST /wall",
        "docs": "/docs",
    }
