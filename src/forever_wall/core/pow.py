"""Proof-of-Work helpers.

A solution is accepted when the hex digest of ``nonce + solution`` starts with
``difficulty`` zero characters. Each hex character is zero with probability
1/16, so a solver needs about ``16 ** difficulty`` attempts while the server
checks a claim with a single digest.
"""
from __future__ import annotations

import hashlib
from typing import Literal

import blake3

HashAlgorithm = Literal["sha256", "blake3"]
DEFAULT_DIFFICULTY = 5
DEFAULT_HASH_ALGORITHM: HashAlgorithm = "sha256"
HINT_PREFIX_CHARS = 20

__all__ = [
    "DEFAULT_DIFFICULTY",
    "HashAlgorithm",
    "describe_attempt",
    "digest_hex",
    "leading_zero_hex_digits",
    "verify",
]


def digest_hex(
    nonce: str,
    solution: str,
    hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM,
) -> str:
    """Return the lowercase hex digest of ``nonce`` followed by ``solution``.

    Args:
        nonce: Challenge token; hashed first.
        solution: Client-chosen string appended to the nonce without a separator.
        hash_algorithm: Hash algorithm to use ("sha256" or "blake3").

    Raises:
        ValueError: If the hash algorithm is not supported.
    """
    data = (nonce + solution).encode("utf-8")
    if hash_algorithm == "sha256":
        return hashlib.sha256(data).hexdigest()
    if hash_algorithm == "blake3":
        return blake3.blake3(data).hexdigest()
    raise ValueError(f"Unsupported hash algorithm: {hash_algorithm}")


def leading_zero_hex_digits(hex_digest: str) -> int:
    """Count the number of leading ``'0'`` characters in a hex digest."""
    return len(hex_digest) - len(hex_digest.lstrip("0"))


def verify(
    nonce: str,
    solution: str,
    difficulty: int,
    hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM,
) -> bool:
    """Validate a proposed proof-of-work solution.

    Args:
        nonce: Challenge token supplied by the client.
        solution: Candidate solution found by the client.
        difficulty: Required number of leading zero hex characters.
        hash_algorithm: Hash algorithm to use ("sha256" or "blake3").

    Returns:
        True if the digest of ``nonce + solution`` has at least ``difficulty``
        leading zero hex characters; False otherwise.
    """
    if difficulty <= 0:
        return True
    prefix = digest_hex(nonce, solution, hash_algorithm)[:difficulty]
    return len(prefix) == difficulty and prefix == "0" * difficulty


def describe_attempt(
    nonce: str,
    solution: str,
    difficulty: int,
    hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM,
) -> str:
    """Return a diagnostic line showing the truncated digest of a failed attempt."""
    digest = digest_hex(nonce, solution, hash_algorithm)
    return (
        f'{hash_algorithm.upper()}("{nonce}" + "{solution}") = '
        f"{digest[:HINT_PREFIX_CHARS]}... (needs {difficulty} leading zeros)"
    )
