"""Fire-and-forget writes as owned asyncio tasks.

Best-effort writes (view counters, last-read pointers) are handed to a
``BackgroundWriter`` instead of being left as unawaited coroutines. The
writer keeps a strong reference to every task until it finishes, logs and
drops failures, and drains outstanding work on shutdown.
"""

import asyncio
import logging
from typing import Awaitable, Optional, Set

from exceptions import TransientWriteFailure

logger = logging.getLogger(__name__)


class BackgroundWriter:
    """Dispatches best-effort writes; failures are logged, never raised."""

    def __init__(self, name: str = "background-writes"):
        self.name = name
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False
        self.completed = 0
        self.failed = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, write: Awaitable[object], description: str) -> Optional[asyncio.Task]:
        """Schedule ``write`` on the running loop and return its task.

        After ``close()`` the write is discarded (and closed, if it is a
        coroutine) and None is returned.
        """
        if self._closed:
            logger.warning("%s closed, dropping write: %s", self.name, description)
            close = getattr(write, "close", None)
            if close is not None:
                close()
            return None

        task = asyncio.get_running_loop().create_task(
            self._guarded(write, description), name=f"{self.name}:{description}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _guarded(self, write: Awaitable[object], description: str) -> bool:
        try:
            await write
        except asyncio.CancelledError:
            logger.info("Write cancelled: %s", description)
            raise
        except Exception as e:
            self.failed += 1
            failure = TransientWriteFailure(description, e)
            logger.warning("%s", failure)
            return False
        self.completed += 1
        logger.debug("Write done: %s", description)
        return True

    async def drain(self) -> None:
        """Wait for every write submitted so far."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        self._closed = True
        await self.drain()
        logger.info("%s closed (completed=%d, failed=%d)", self.name, self.completed, self.failed)
