"""Wall message schemas."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from forever_wall.db.time import as_utc
from forever_wall.models.message import Message


class Position(BaseModel):
    """Canvas coordinates rounded to whole pixels."""

    x: int
    y: int

    @classmethod
    def of(cls, message: Message) -> Position:
        x, y = message.rounded_position()
        return cls(x=x, y=y)


class MessageOut(BaseModel):
    """Schema for a message returned by the read endpoints and the stream."""

    id: str
    text: str
    position: Position
    color: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_message(cls, message: Message) -> MessageOut:
        return cls(
            id=message.id,
            text=message.text,
            position=Position.of(message),
            color=message.color,
            created_at=as_utc(message.created_at),
        )


class RateLimitPolicy(BaseModel):
    """Rate-limit policy advertised on reads, with the caller's allowance."""

    max_per_hour: int
    cooldown_seconds: int
    remaining_posts_this_hour: int


class RateLimitStatus(BaseModel):
    """Caller's rate-limit standing after a successful post."""

    remaining_posts_this_hour: int
    cooldown_seconds: int


class WallListOut(BaseModel):
    """Schema for the JSON rendering of the wall."""

    success: bool = True
    count: int
    messages: list[MessageOut]
    hint: str
    rate_limits: RateLimitPolicy
    api: dict[str, str] = Field(default_factory=dict)


class WallPostData(BaseModel):
    """Details of a freshly pinned message."""

    id: str
    text: str
    position: Position
    color: str
    url: str


class WallPostOut(BaseModel):
    """Schema for a successful post response."""

    success: bool = True
    message: str
    data: WallPostData
    rate_limit: RateLimitStatus
