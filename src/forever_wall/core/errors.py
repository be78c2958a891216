"""Error taxonomy for the admission and storage paths.

Every error maps to an HTTP status and a JSON body that always carries
``success: false`` and a human-readable ``error`` string.
"""

from __future__ import annotations

from typing import Any, ClassVar

__all__ = [
    "ConfigurationError",
    "ProofOfWorkError",
    "RateLimitError",
    "StorageError",
    "ValidationError",
    "WallError",
]


class WallError(Exception):
    """Base class for errors reported to wall clients."""

    status_code: ClassVar[int] = 500
    kind: ClassVar[str] = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, Any]:
        """Return the JSON body describing this error."""
        return {"success": False, "error": self.message}


class ValidationError(WallError):
    """Raised for missing, empty or oversized request fields."""

    status_code = 400
    kind = "validation"


class ProofOfWorkError(WallError):
    """Raised when a submitted solution does not satisfy the challenge."""

    status_code = 400
    kind = "proof_of_work"

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        if self.hint:
            payload["hint"] = self.hint
        return payload


class RateLimitError(WallError):
    """Raised when a client posts too soon or too often."""

    status_code = 429
    kind = "rate_limited"

    def __init__(self, message: str, retry_after_seconds: int) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds

    def to_payload(self) -> dict[str, Any]:
        payload = super().to_payload()
        payload["retry_after_seconds"] = self.retry_after_seconds
        return payload


class ConfigurationError(WallError):
    """Raised when the durable store is unconfigured or unreachable."""

    status_code = 500
    kind = "configuration"


class StorageError(WallError):
    """Raised when an insert or query against the durable store fails."""

    status_code = 500
    kind = "storage"
