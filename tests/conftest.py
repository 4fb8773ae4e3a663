"""Shared pytest fixtures for the NovelNest test suite."""

import os
import tempfile

# Must be set before config.py is imported by anything under test
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="novelnest-logs-"))

import pytest
from mongomock_motor import AsyncMongoMockClient


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mongo_db():
    """Return an in-memory motor-compatible database."""
    return AsyncMongoMockClient()["novelnest_test"]


@pytest.fixture
def store(mongo_db):
    from document_store import DocumentStore
    return DocumentStore(mongo_db)


# ---------------------------------------------------------------------------
# Tracker fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def writer():
    from tracking.background import BackgroundWriter
    return BackgroundWriter(name="test-writes")


@pytest.fixture
def counters(store, writer):
    from tracking.counter_updater import CounterUpdater
    return CounterUpdater(store, writer)


@pytest.fixture
def resolver(store, writer):
    from tracking.session_state import SessionStateResolver
    return SessionStateResolver(store, writer)


# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

DEFAULT_CHAPTERS = (("c1", 1), ("c2", 2), ("c3", 3))


@pytest.fixture
def seed(store):
    """Return a coroutine function that stores a novel and its chapters.

    Chapters are given as (chapter_id, chapterNumber) pairs and are stored
    in the given order, so callers can check that reading order comes from
    the chapter numbers rather than insertion order.
    """
    from utils import utcnow

    async def _seed(novel_id="N1", chapters=DEFAULT_CHAPTERS, uploader="author-1", genre=("Fantasy",), views=0):
        await store.set("novels", novel_id, {
            "title": f"Novel {novel_id}",
            "author": "Test Author",
            "genre": list(genre),
            "views": views,
            "leadingCharacter": "female",
            "story": "A story worth reading.",
            "uploadBy": uploader,
            "createdAt": utcnow(),
        })
        for chapter_id, number in chapters:
            await store.set(f"novels/{novel_id}/chapters", chapter_id, {
                "chapterNumber": number,
                "title": f"Chapter {number}",
                "content": f"Text of chapter {number}.\nSecond paragraph.",
                "views": 0,
                "uploadDate": utcnow(),
            })
        return novel_id

    return _seed
