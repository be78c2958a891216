"""Wall read, write and realtime stream endpoints."""

from __future__ import annotations

import logging
from typing import Literal

from fastapi import APIRouter, Query, Request, WebSocket, WebSocketDisconnect, status
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from forever_wall.api.dependencies import ClientKeyDep, GatewayDep
from forever_wall.core.errors import RateLimitError, WallError
from forever_wall.core.result import Err
from forever_wall.schemas.wall import (
    MessageOut,
    Position,
    RateLimitPolicy,
    RateLimitStatus,
    WallListOut,
    WallPostData,
    WallPostOut,
)
from forever_wall.services.message_store import render_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wall", tags=["wall"])

READ_HINT = "Read these before posting! You can respond to others or find an empty spot."
POST_BANNER = "Your words are now on the wall forever \U0001f389"
API_USAGE = {
    "post": "POST /wall with { message, nonce, solution }",
    "challenge": "GET /challenge",
    "stream": "WS /wall/stream",
}


def error_response(error: WallError) -> JSONResponse:
    """Convert a wall error into its JSON response."""
    headers = None
    if isinstance(error, RateLimitError):
        headers = {"Retry-After": str(error.retry_after_seconds)}
    return JSONResponse(status_code=error.status_code, content=error.to_payload(), headers=headers)


def _parse_limit(raw: str | None) -> int | None:
    if raw is None:
        return None
    try:
        return int(raw.strip())
    except ValueError:
        return None


@router.get("", response_model=WallListOut)
async def read_wall(
    gateway: GatewayDep,
    client_key: ClientKeyDep,
    limit: str | None = Query(None, description="Maximum number of messages (1-100)"),
    format: str = Query("json", description="Response format: json or text"),
    order: Literal["desc", "asc"] = Query(
        "desc",
        description="Newest first (desc) or oldest first (asc)",
    ),
) -> Response | WallListOut:
    """Return the most recent messages on the wall.

    Args:
        gateway: Admission gateway owning the message store
        client_key: Rate-limit key of the caller, for the remaining allowance
        limit: Maximum number of messages, clamped to [1, 100]; defaults to 50
        format: "text" for numbered plain-text lines, anything else for JSON
        order: Sort order by creation time

    Returns:
        JSON listing or a plain-text rendering of the wall
    """
    result = await gateway.read(_parse_limit(limit), order)
    if isinstance(result, Err):
        return error_response(result.error)
    messages = result.value

    if format == "text":
        return PlainTextResponse(render_text(messages))

    return WallListOut(
        count=len(messages),
        messages=[MessageOut.from_message(m) for m in messages],
        hint=READ_HINT,
        rate_limits=RateLimitPolicy(
            **gateway.config.rate_limits,
            remaining_posts_this_hour=gateway.limiter.remaining(client_key),
        ),
        api=API_USAGE,
    )


@router.post("", response_model=WallPostOut)
async def post_to_wall(
    request: Request,
    gateway: GatewayDep,
    client_key: ClientKeyDep,
) -> Response | WallPostOut:
    """Pin a message to the wall after rate limiting and proof-of-work checks.

    The body is ``{"message": str, "nonce": str, "solution": str}``.

    Rejections are returned as JSON error responses: 400 for invalid input or
    proof-of-work, 429 when rate limited, 500 when storage fails.

    Returns:
        Details of the pinned message and the caller's remaining allowance
    """
    raw_body = await request.body()
    result = await gateway.submit(client_key, raw_body)
    if isinstance(result, Err):
        return error_response(result.error)

    accepted = result.value
    message = accepted.message
    return WallPostOut(
        message=POST_BANNER,
        data=WallPostData(
            id=message.id,
            text=message.text,
            position=Position.of(message),
            color=message.color,
            url=gateway.config.site_url,
        ),
        rate_limit=RateLimitStatus(
            remaining_posts_this_hour=accepted.remaining_posts,
            cooldown_seconds=gateway.config.rate_limit_cooldown_seconds,
        ),
    )


@router.websocket("/stream")
async def stream_wall(websocket: WebSocket, gateway: GatewayDep) -> None:
    """Push every newly pinned message to the connected reader.

    Delivery is at-most-once; readers that reconnect should re-read ``GET /wall``.
    """
    await websocket.accept()
    async with gateway.broadcaster.subscribe() as queue:
        try:
            while True:
                event = await queue.get()
                if event is None:
                    await websocket.close(code=status.WS_1001_GOING_AWAY)
                    return
                await websocket.send_json(event.to_dict())
        except WebSocketDisconnect:
            logger.debug("Realtime reader disconnected")
