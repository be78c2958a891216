"""Data access helpers for working with wall messages."""
from __future__ import annotations

import logging
from typing import Literal

from sqlalchemy import select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from forever_wall.core.errors import ConfigurationError, StorageError
from forever_wall.models.message import Message

__all__ = ["MessageRepository", "SortOrder"]

SortOrder = Literal["asc", "desc"]

logger = logging.getLogger(__name__)


class MessageRepository:
    """Thin wrapper around database access for message rows.

    Each call opens its own session so the repository can be shared across
    concurrently running requests and worker threads.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        """Initialize the repository with a SQLAlchemy session factory."""
        self.session_factory = session_factory

    def insert(self, message: Message) -> Message:
        """Insert a new message and return the persisted ORM instance.

        Raises:
            ConfigurationError: If the database cannot be reached.
            StorageError: If the insert fails for any other reason.
        """
        try:
            with self.session_factory() as session:
                session.add(message)
                session.commit()
                session.refresh(message)
                session.expunge(message)
        except OperationalError as exc:
            logger.error("Database unavailable while saving message %s: %s", message.id, exc)
            raise ConfigurationError("Database not configured") from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to save message %s: %s", message.id, exc)
            raise StorageError("Failed to save message") from exc
        return message

    def list_recent(self, limit: int, order: SortOrder = "desc") -> list[Message]:
        """Return up to ``limit`` messages sorted by creation time, then id.

        Raises:
            ConfigurationError: If the database cannot be reached.
            StorageError: If the query fails for any other reason.
        """
        if order == "asc":
            columns = (Message.created_at.asc(), Message.id.asc())
        else:
            columns = (Message.created_at.desc(), Message.id.desc())
        stmt = select(Message).order_by(*columns).limit(limit)
        try:
            with self.session_factory() as session:
                messages = list(session.scalars(stmt))
                for message in messages:
                    session.expunge(message)
        except OperationalError as exc:
            logger.error("Database unavailable while fetching messages: %s", exc)
            raise ConfigurationError("Database not configured") from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to fetch messages: %s", exc)
            raise StorageError("Failed to fetch messages") from exc
        return messages
