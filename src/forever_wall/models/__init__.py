# src/forever_wall/models/__init__.py
"""SQLAlchemy models for the Forever Wall application."""

from .message import Message

__all__ = ["Message"]
