"""Background maintenance for process-local admission state.

The ``MaintenanceWorker`` periodically evicts expired challenges and idle
rate-limit records. It runs independently of request handling and uses the
same locks as the request path.
"""

from __future__ import annotations

import asyncio
import logging

from forever_wall.services.challenges import ChallengeIssuer
from forever_wall.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class MaintenanceWorker:
    """Run the challenge and rate-limit sweeps on a fixed interval."""

    def __init__(
        self,
        issuer: ChallengeIssuer,
        limiter: RateLimiter,
        interval_seconds: float,
    ) -> None:
        self.issuer = issuer
        self.limiter = limiter
        self.interval_seconds = max(0.01, float(interval_seconds))
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""
        if self.running:
            return
        self._stopping.clear()
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._stopping.set()
        await self._task
        self._task = None

    def sweep_once(self) -> tuple[int, int]:
        """Run both sweeps; return (challenges evicted, records evicted)."""
        challenges = self.issuer.sweep_expired()
        records = self.limiter.sweep()
        return challenges, records

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except TimeoutError:
                pass
            if self._stopping.is_set():
                break
            try:
                challenges, records = self.sweep_once()
            except Exception as exc:  # noqa: BLE001 - keep the loop alive
                logger.error("Maintenance sweep failed: %s", exc, exc_info=True)
                continue
            if challenges or records:
                logger.info(
                    "Maintenance sweep evicted %d challenges and %d rate-limit records",
                    challenges,
                    records,
                )
