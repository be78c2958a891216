"""Client-side proof-of-work utilities.

Brute-force solver for wall challenges, used by the demo client and tests.
A solution is any string; this solver tries decimal counters in order.
"""

from __future__ import annotations

import time

from forever_wall.core.pow import (
    DEFAULT_HASH_ALGORITHM,
    HashAlgorithm,
    digest_hex,
    leading_zero_hex_digits,
)


def solve(
    nonce: str,
    difficulty: int,
    hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM,
    max_attempts: int = 50_000_000,
    start: int = 0,
) -> str | None:
    """Find a solution for ``nonce`` by brute force.

    Args:
        nonce: Challenge nonce from ``GET /challenge``
        difficulty: Required number of leading zero hex characters
        hash_algorithm: Hash algorithm the server verifies with
        max_attempts: Maximum number of candidates to try before giving up
        start: First counter value to try

    Returns:
        The first satisfying solution string, or None if none was found
    """
    for counter in range(start, start + max_attempts):
        candidate = str(counter)
        if leading_zero_hex_digits(digest_hex(nonce, candidate, hash_algorithm)) >= difficulty:
            return candidate
    return None


def solve_timed(
    nonce: str,
    difficulty: int,
    hash_algorithm: HashAlgorithm = DEFAULT_HASH_ALGORITHM,
    max_attempts: int = 50_000_000,
) -> tuple[str | None, float]:
    """Solve a challenge and report the elapsed wall-clock seconds."""
    started = time.perf_counter()
    solution = solve(nonce, difficulty, hash_algorithm, max_attempts)
    return solution, time.perf_counter() - started


def expected_attempts(difficulty: int) -> int:
    """Return the average number of digests needed for ``difficulty``."""
    return 16 ** max(0, difficulty)
