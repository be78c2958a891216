# src/forever_wall/main.py
"""Main entry point for the Forever Wall application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from forever_wall.api.endpoints import challenge_router, system_router, wall_router
from forever_wall.core.errors import WallError
from forever_wall.core.settings import settings
from forever_wall.db.session import SessionLocal, create_tables
from forever_wall.services.gateway import AdmissionGateway

logger = logging.getLogger("forever_wall")

# Initialize FastAPI app
app = FastAPI(
    title="Forever Wall API",
    description="An append-only wall for anonymous writers, gated by proof-of-work",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(system_router)
app.include_router(challenge_router)
app.include_router(wall_router)


@app.exception_handler(WallError)
async def wall_error_handler(request: Request, exc: WallError) -> JSONResponse:
    """Render any wall error that escapes an endpoint as a structured response."""
    logger.warning("%s %s failed (%s): %s", request.method, request.url.path, exc.kind, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def configure_logging(level: str = settings.log_level) -> None:
    """Configure root logging once for the service process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@app.on_event("startup")
async def on_startup() -> None:
    configure_logging()
    gateway: AdmissionGateway | None = getattr(app.state, "gateway", None)
    if gateway is None:
        if settings.database_auto_create:
            create_tables()
        gateway = AdmissionGateway.from_session_factory(SessionLocal, settings)
        app.state.gateway = gateway
    await gateway.start()
    logger.info(
        "Forever Wall ready (difficulty=%d, algorithm=%s, challenge store=%s)",
        gateway.config.pow_difficulty,
        gateway.config.pow_hash_algorithm,
        gateway.config.challenge_backend,
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    gateway: AdmissionGateway | None = getattr(app.state, "gateway", None)
    if gateway:
        await gateway.stop()
    app.state.gateway = None


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("forever_wall.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
