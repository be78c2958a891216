"""Tagged result type threaded through the admission gates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from forever_wall.core.errors import WallError

T = TypeVar("T")

__all__ = ["Err", "Ok", "Result"]


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying the error that rejected the request."""

    error: WallError

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> str:
        return self.error.kind


Result = Ok[T] | Err
