"""Data access layer for Forever Wall."""

from .message_repo import MessageRepository

__all__ = ["MessageRepository"]
