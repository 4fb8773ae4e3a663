"""Resolve a chapter visit into its neighbours in reading order, and record last-read progress."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from document_store import Document, DocumentStore
from tracking.background import BackgroundWriter
from tracking.counter_updater import chapters_path
from utils import utcnow

logger = logging.getLogger(__name__)


def library_path(user_id: str) -> str:
    return f"users/{user_id}/library"


@dataclass
class ChapterContext:
    """Everything a chapter page renders, or a not-found state."""
    novel_id: str
    chapter_id: str
    novel: Optional[Document] = None
    current: Optional[Document] = None
    previous: Optional[Document] = None
    next: Optional[Document] = None

    @property
    def found(self) -> bool:
        return self.novel is not None and self.current is not None


def locate(chapters: List[Document], chapter_id: str):
    """Return (previous, current, next) by list position.

    ``chapters`` must already be in reading order. Gaps in chapter numbers
    are irrelevant: neighbours are whatever sits next to the chapter in the
    list, and None past either end or when the id is absent.
    """
    for index, chapter in enumerate(chapters):
        if chapter["id"] == chapter_id:
            previous = chapters[index - 1] if index > 0 else None
            following = chapters[index + 1] if index + 1 < len(chapters) else None
            return previous, chapter, following
    return None, None, None


class SessionStateResolver:
    def __init__(self, store: DocumentStore, writer: BackgroundWriter):
        self.store = store
        self.writer = writer

    async def load_chapters(self, novel_id: str) -> List[Document]:
        return await self.store.query(
            chapters_path(novel_id), order_by=[("chapterNumber", "asc")]
        )

    async def resolve(self, novel_id: str, chapter_id: str) -> ChapterContext:
        """Load the novel and its chapters and place ``chapter_id`` among them.

        A missing novel or chapter comes back as a context with
        ``found == False``. Nothing is written; callers decide whether the
        visit still counts before calling ``record_last_read``.
        """
        context = ChapterContext(novel_id=novel_id, chapter_id=chapter_id)

        context.novel = await self.store.get("novels", novel_id)
        if context.novel is None:
            logger.info("Novel not found: %s", novel_id)
            return context

        chapters = await self.load_chapters(novel_id)
        context.previous, context.current, context.next = locate(chapters, chapter_id)
        if context.current is None:
            logger.info("Chapter %s not found in novel %s", chapter_id, novel_id)
        return context

    def record_last_read(self, user_id: str, novel_id: str, chapter_number: int):
        # Progress fields only: membership (inLibrary) is left to the library actions
        return self.writer.submit(
            self.store.set(
                library_path(user_id),
                novel_id,
                {
                    "novelId": novel_id,
                    "lastReadChapter": chapter_number,
                    "lastReadAt": utcnow(),
                },
            ),
            f"last read user={user_id} novel={novel_id} chapter={chapter_number}",
        )
