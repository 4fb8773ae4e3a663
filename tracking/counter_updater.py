"""Best-effort view counters."""

import asyncio
import logging
from typing import Optional

from document_store import DocumentStore
from tracking.background import BackgroundWriter

logger = logging.getLogger(__name__)

VIEW_FIELD = "views"
VIEW_DELTA = 1


def chapters_path(novel_id: str) -> str:
    return f"novels/{novel_id}/chapters"


class CounterUpdater:
    """Turns completion signals and novel-page loads into one increment each.

    The store's ``$inc`` is atomic; this class only guarantees that every
    call issues exactly one increment. Failures are logged by the writer and
    dropped, with no retry.
    """

    def __init__(self, store: DocumentStore, writer: BackgroundWriter):
        self.store = store
        self.writer = writer

    def chapter_finished(self, novel_id: str, chapter_id: str) -> Optional[asyncio.Task]:
        logger.info("Chapter finished: novel=%s chapter=%s", novel_id, chapter_id)
        return self.writer.submit(
            self.store.increment(chapters_path(novel_id), chapter_id, VIEW_FIELD, VIEW_DELTA),
            f"chapter view novel={novel_id} chapter={chapter_id}",
        )

    def novel_viewed(self, novel_id: str) -> Optional[asyncio.Task]:
        return self.writer.submit(
            self.store.increment("novels", novel_id, VIEW_FIELD, VIEW_DELTA),
            f"novel view novel={novel_id}",
        )
