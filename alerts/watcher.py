"""
Block Watcher.

============================================================
PURPOSE
============================================================
Polls the chain tip and feeds every new block to the alert
manager, exactly once per height, recording progress so a
restart resumes where it stopped.

============================================================
CATCH-UP
============================================================
- First run: only the current tip is processed
- Later runs: every height after the last processed one, at most
  max_catchup_blocks of them; older heights are skipped and their
  due triggers still fire through the <= height rule

============================================================
"""

import asyncio
import logging
from typing import List, Optional

from chain.base import ChainQueryService, fetch_current_block_height
from chain.blocks import build_new_block_event
from storage.database import Database
from storage.repositories.alerts import ProcessedBlockRepository

from .events import Notification
from .manager import AlertManager


logger = logging.getLogger(__name__)


class BlockWatcher:
    """
    Drives AlertManager.on_new_block from a polling loop.

    Runs as a background task.
    """

    def __init__(
        self,
        chain: ChainQueryService,
        manager: AlertManager,
        database: Database,
        poll_interval: float = 10.0,
        max_catchup_blocks: int = 10,
    ):
        """Initialize watcher."""
        if max_catchup_blocks < 1:
            raise ValueError("max_catchup_blocks must be at least 1")
        self._chain = chain
        self._manager = manager
        self._database = database
        self._interval = poll_interval
        self._max_catchup = max_catchup_blocks
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def last_processed_height(self) -> Optional[int]:
        with self._database.session() as session:
            return ProcessedBlockRepository(session).get_last_processed_height()

    def _heights_to_process(self, tip: int, last_processed: Optional[int]) -> List[int]:
        if last_processed is None:
            return [tip]
        if tip <= last_processed:
            return []

        first = last_processed + 1
        if tip - first + 1 > self._max_catchup:
            skipped_to = tip - self._max_catchup
            logger.warning(
                f"Behind by {tip - last_processed} blocks, skipping {first}..{skipped_to}"
            )
            first = skipped_to + 1
        return list(range(first, tip + 1))

    async def process_block(self, block_height: int) -> List[Notification]:
        """Build the block event, run it through the manager, record it."""
        event = await build_new_block_event(self._chain, block_height)
        notifications = await self._manager.on_new_block_event(event)

        with self._database.transaction() as session:
            ProcessedBlockRepository(session).record(event.block_height, event.block_hash)

        return notifications

    async def poll_once(self) -> List[Notification]:
        """
        Process every new block since the last poll.

        Stops at the first failing block; it is retried next poll.

        Returns:
            Notifications produced, in block order
        """
        tip = await fetch_current_block_height(self._chain)
        heights = self._heights_to_process(tip, self.last_processed_height())

        notifications: List[Notification] = []
        for block_height in heights:
            notifications.extend(await self.process_block(block_height))
        return notifications

    async def start(self) -> None:
        """Start the watcher."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info("Block watcher started")

    async def stop(self) -> None:
        """Stop the watcher."""
        self._running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Block watcher stopped")

    async def _run(self) -> None:
        """Main run loop."""
        while self._running:
            try:
                await self.poll_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Block poll error: {e}")

            await asyncio.sleep(self._interval)
