# src/forever_wall/models/message.py
"""SQLAlchemy model for wall messages."""

import math
from datetime import datetime

from sqlalchemy import DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from forever_wall.db.session import Base
from forever_wall.db.time import utcnow


class Message(Base):
    """A short text item pinned to the wall.

    Rows are written once and never updated or deleted; the wall is
    append-only. Position and colour are assigned by the server.
    """

    __tablename__ = "messages"

    # Random UUID4 in canonical string form.
    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    text: Mapped[str] = mapped_column(Text, nullable=False)

    # Canvas coordinates, always inside the padded bounds [200, 2800].
    x: Mapped[float] = mapped_column(Float, nullable=False)
    y: Mapped[float] = mapped_column(Float, nullable=False)

    color: Mapped[str] = mapped_column(String(7), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    def rounded_position(self) -> tuple[int, int]:
        """Return ``(x, y)`` rounded half-up to whole pixels."""
        return math.floor(self.x + 0.5), math.floor(self.y + 0.5)
