"""Tests for chapter resolution and last-read tracking."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from exceptions import StoreError
from tracking.session_state import library_path, locate


def chapters(*ids):
    return [{"id": chapter_id, "chapterNumber": i + 1} for i, chapter_id in enumerate(ids)]


class TestLocate:
    def test_neighbours_are_list_adjacent(self):
        ordered = chapters("a", "b", "c", "d", "e")
        for index, chapter in enumerate(ordered):
            previous, current, following = locate(ordered, chapter["id"])
            assert current is chapter
            assert previous == (ordered[index - 1] if index > 0 else None)
            assert following == (ordered[index + 1] if index < len(ordered) - 1 else None)

    def test_single_chapter_has_no_neighbours(self):
        assert locate(chapters("only"), "only")[0] is None
        assert locate(chapters("only"), "only")[2] is None

    def test_absent_id(self):
        assert locate(chapters("a", "b"), "zzz") == (None, None, None)


class TestResolve:
    @pytest.mark.asyncio
    async def test_middle_chapter(self, resolver, seed):
        await seed()
        context = await resolver.resolve("N1", "c2")
        assert context.found
        assert context.current["id"] == "c2"
        assert context.previous["id"] == "c1"
        assert context.next["id"] == "c3"
        assert context.novel["title"] == "Novel N1"

    @pytest.mark.asyncio
    async def test_first_chapter(self, resolver, seed):
        await seed()
        context = await resolver.resolve("N1", "c1")
        assert context.previous is None
        assert context.next["id"] == "c2"

    @pytest.mark.asyncio
    async def test_order_comes_from_chapter_numbers_with_gaps(self, resolver, seed):
        await seed(chapters=(("late", 10), ("early", 1), ("mid", 4)))
        context = await resolver.resolve("N1", "mid")
        assert context.previous["id"] == "early"
        assert context.next["id"] == "late"

        last = await resolver.resolve("N1", "late")
        assert last.next is None

    @pytest.mark.asyncio
    async def test_missing_novel_is_not_found(self, resolver):
        context = await resolver.resolve("nope", "c1")
        assert not context.found
        assert context.novel is None

    @pytest.mark.asyncio
    async def test_missing_chapter_is_not_found(self, resolver, seed):
        await seed()
        context = await resolver.resolve("N1", "c9")
        assert not context.found
        assert context.novel is not None
        assert context.previous is None and context.next is None


class TestLastRead:
    @pytest.mark.asyncio
    async def test_resolve_writes_nothing(self, store, writer, resolver, seed):
        await seed()
        with patch.object(store, "set", new=AsyncMock()) as set_mock:
            context = await resolver.resolve("N1", "c1")
            await writer.drain()
        assert context.found
        set_mock.assert_not_called()
        assert writer.completed == 0

    @pytest.mark.asyncio
    async def test_record_upserts_progress_only(self, store, writer, resolver):
        resolver.record_last_read("U1", "N1", 1)
        await writer.drain()

        entry = await store.get(library_path("U1"), "N1")
        assert entry["lastReadChapter"] == 1
        assert entry["lastReadAt"] is not None
        assert "inLibrary" not in entry

    @pytest.mark.asyncio
    async def test_record_keeps_library_membership(self, store, writer, resolver):
        await store.set(library_path("U1"), "N1", {"novelId": "N1", "inLibrary": True, "lastReadChapter": 1})
        resolver.record_last_read("U1", "N1", 3)
        await writer.drain()

        entry = await store.get(library_path("U1"), "N1")
        assert entry["inLibrary"] is True
        assert entry["lastReadChapter"] == 3

    @pytest.mark.asyncio
    async def test_failed_upsert_is_dropped(self, store, writer, resolver, seed):
        await seed()
        context = await resolver.resolve("N1", "c2")
        with patch.object(store, "set", new=AsyncMock(side_effect=StoreError("write refused"))):
            resolver.record_last_read("U1", "N1", context.current["chapterNumber"])
            await writer.drain()
        assert context.current["content"].startswith("Text of chapter 2")
        assert writer.failed == 1

    @pytest.mark.asyncio
    async def test_slow_upsert_runs_in_background(self, store, writer, resolver):
        gate = asyncio.Event()

        async def stalled_set(*args, **kwargs):
            await gate.wait()

        with patch.object(store, "set", new=stalled_set):
            task = resolver.record_last_read("U1", "N1", 2)
            assert not task.done()
            assert writer.pending == 1
            gate.set()
            await writer.drain()
        assert writer.completed == 1
