"""Message identity, placement and retrieval for the wall."""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Final

from forever_wall.core.errors import ValidationError
from forever_wall.core.settings import settings
from forever_wall.db.time import utcnow
from forever_wall.models.message import Message
from forever_wall.repositories.message_repo import MessageRepository, SortOrder

logger = logging.getLogger(__name__)

PALETTE: Final[tuple[str, ...]] = (
    "#ff6b6b", "#feca57", "#48dbfb", "#ff9ff3", "#54a0ff",
    "#5f27cd", "#00d2d3", "#1dd1a1", "#ff9f43", "#ee5a24",
)
CANVAS_MIN: Final[float] = 200.0
CANVAS_MAX: Final[float] = 2800.0
EMPTY_WALL_TEXT: Final[str] = "The wall is empty."


def normalize_text(raw: object, max_length: int = settings.message_max_length) -> str:
    """Return ``raw`` stripped of surrounding whitespace.

    Raises:
        ValidationError: If ``raw`` is not a string, is blank, or is longer
            than ``max_length`` code points once stripped.
    """
    if not isinstance(raw, str) or not raw:
        raise ValidationError("Message is required")
    text = raw.strip()
    if not text:
        raise ValidationError("Message cannot be empty")
    if len(text) > max_length:
        raise ValidationError(f"Message must be {max_length} characters or less")
    return text


def clamp_limit(
    limit: int | None,
    default: int = settings.wall_default_limit,
    maximum: int = settings.wall_max_limit,
) -> int:
    """Clamp a requested page size into ``[1, maximum]``."""
    if limit is None:
        return default
    return max(1, min(limit, maximum))


def render_text(messages: Sequence[Message]) -> str:
    """Render messages as numbered plain-text lines for terminal readers."""
    if not messages:
        return EMPTY_WALL_TEXT
    lines = []
    for i, message in enumerate(messages, start=1):
        x, y = message.rounded_position()
        lines.append(f'[{i}] "{message.text}" (at {x}, {y})')
    return "\n".join(lines)


class MessageStore:
    """Assign server-side fields to new messages and read the wall back.

    Persistence is delegated to a ``MessageRepository``; its errors are
    propagated unchanged and never retried here.
    """

    def __init__(
        self,
        repository: MessageRepository,
        *,
        max_length: int = settings.message_max_length,
        default_limit: int = settings.wall_default_limit,
        max_limit: int = settings.wall_max_limit,
        rng: random.Random | None = None,
        now: Callable[[], datetime] = utcnow,
    ) -> None:
        self.repository = repository
        self.max_length = max_length
        self.default_limit = default_limit
        self.max_limit = max_limit
        self._rng = rng or random.SystemRandom()
        self._now = now

    def build(self, raw_text: object) -> Message:
        """Validate ``raw_text`` and return an unsaved message with assigned fields."""
        text = normalize_text(raw_text, self.max_length)
        return Message(
            id=str(uuid.uuid4()),
            text=text,
            x=self._rng.uniform(CANVAS_MIN, CANVAS_MAX),
            y=self._rng.uniform(CANVAS_MIN, CANVAS_MAX),
            color=self._rng.choice(PALETTE),
            created_at=self._now(),
        )

    def append(self, raw_text: object) -> Message:
        """Create and persist a message.

        Raises:
            ValidationError: If the text is missing, blank or too long.
            ConfigurationError: If the database is unreachable.
            StorageError: If the insert fails.
        """
        message = self.build(raw_text)
        saved = self.repository.insert(message)
        logger.info("Message %s pinned at (%.0f, %.0f)", saved.id, saved.x, saved.y)
        return saved

    def list(self, limit: int | None = None, order: SortOrder = "desc") -> list[Message]:
        """Return up to ``limit`` messages, newest first unless ``order`` is "asc"."""
        size = clamp_limit(limit, self.default_limit, self.max_limit)
        return self.repository.list_recent(size, order)
