"""Background task that finishes deletes left as tombstones."""

import asyncio
import logging

from fragments import config
from fragments.storage.durable import DurableBackend

logger = logging.getLogger(__name__)


class TombstoneSweeper:
    """
    Periodically purges blobs and metadata rows of tombstoned fragments.
    """

    def __init__(self, backend: DurableBackend, interval_seconds: int = config.SWEEP_INTERVAL_SECONDS):
        """
        Initialize sweeper task.

        Args:
            backend: Durable backend whose tombstones are purged
            interval_seconds: Time between sweeps
        """
        self.backend = backend
        self.interval_seconds = interval_seconds
        self._running = False
        self._task = None

    async def start(self) -> None:
        """Start the background sweep task."""
        if self._running:
            logger.warning("Tombstone sweeper already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started tombstone sweeper (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the background sweep task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

        logger.info("Stopped tombstone sweeper")

    async def _run(self) -> None:
        while self._running:
            try:
                await self.sweep_once()
                await asyncio.sleep(self.interval_seconds)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in tombstone sweeper: {e}", exc_info=True)
                await asyncio.sleep(self.interval_seconds)

    async def sweep_once(self) -> int:
        """Execute one sweep. Returns the number of fragments purged."""
        purged = await self.backend.purge_tombstones()
        if purged:
            logger.info(f"Sweep complete: {purged} tombstoned fragments purged")
        else:
            logger.debug("Sweep complete: no tombstones")
        return purged
