"""Tests for the path-addressed document store."""

from unittest.mock import MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from document_store import DocumentStore, build_query, build_sort, split_path
from exceptions import NotFoundError, StoreError


class TestPaths:
    def test_top_level_collection(self):
        assert split_path("novels") == ("novels", "")

    def test_sub_collection(self):
        assert split_path("novels/N1/chapters") == ("chapters", "novels/N1")
        assert split_path("/users/U1/library/") == ("library", "users/U1")

    def test_document_path_is_rejected(self):
        with pytest.raises(ValueError):
            split_path("novels/N1")

    def test_query_translation(self):
        query = build_query("novels/N1", [
            ("genre", "array-contains", "Fantasy"),
            ("views", ">=", 10),
            ("title", "in", ("a", "b")),
        ])
        assert query == {
            "_parent": "novels/N1",
            "genre": {"$all": ["Fantasy"]},
            "views": {"$gte": 10},
            "title": {"$in": ["a", "b"]},
        }

    def test_unknown_operator_rejected(self):
        with pytest.raises(ValueError):
            build_query("", [("views", "~", 1)])

    def test_sort_translation(self):
        assert build_sort([("views", "desc"), ("title", "ASC")]) == [("views", -1), ("title", 1)]


class TestCrud:
    @pytest.mark.asyncio
    async def test_set_and_get(self, store):
        await store.set("novels", "N1", {"title": "First", "views": 0})
        novel = await store.get("novels", "N1")
        assert novel == {"id": "N1", "title": "First", "views": 0}

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get("novels", "nope") is None

    @pytest.mark.asyncio
    async def test_set_overwrites_listed_fields_only(self, store):
        await store.set("users/U1/library", "N1", {"inLibrary": True, "addedAt": "then"})
        await store.set("users/U1/library", "N1", {"lastReadChapter": 4})
        entry = await store.get("users/U1/library", "N1")
        assert entry["inLibrary"] is True
        assert entry["lastReadChapter"] == 4

    @pytest.mark.asyncio
    async def test_add_generates_id(self, store):
        novel_id = await store.add("novels", {"title": "Generated", "id": "ignored"})
        novel = await store.get("novels", novel_id)
        assert novel["title"] == "Generated"
        assert novel["id"] == novel_id

    @pytest.mark.asyncio
    async def test_update_merges(self, store):
        await store.set("novels", "N1", {"title": "Old", "author": "A"})
        await store.update("novels", "N1", {"title": "New"})
        assert await store.get("novels", "N1") == {"id": "N1", "title": "New", "author": "A"}

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            await store.update("novels", "ghost", {"title": "x"})

    @pytest.mark.asyncio
    async def test_delete(self, store):
        await store.set("novels", "N1", {"title": "Doomed"})
        assert await store.delete("novels", "N1") is True
        assert await store.delete("novels", "N1") is False
        assert await store.get("novels", "N1") is None

    @pytest.mark.asyncio
    async def test_increment(self, store):
        await store.set("novels", "N1", {"views": 3})
        await store.increment("novels", "N1", "views", 1)
        await store.increment("novels", "N1", "views", 1)
        assert (await store.get("novels", "N1"))["views"] == 5

    @pytest.mark.asyncio
    async def test_increment_missing_raises(self, store):
        with pytest.raises(NotFoundError):
            await store.increment("novels", "ghost", "views", 1)


class TestQuery:
    @pytest.mark.asyncio
    async def test_order_and_limit(self, store):
        for novel_id, views in (("a", 5), ("b", 50), ("c", 20)):
            await store.set("novels", novel_id, {"views": views})
        top = await store.query("novels", order_by=[("views", "desc")], limit=2)
        assert [n["id"] for n in top] == ["b", "c"]

    @pytest.mark.asyncio
    async def test_array_contains(self, store):
        await store.set("novels", "a", {"genre": ["Fantasy", "War"]})
        await store.set("novels", "b", {"genre": ["Romance"]})
        found = await store.query("novels", filters=[("genre", "array-contains", "War")])
        assert [n["id"] for n in found] == ["a"]

    @pytest.mark.asyncio
    async def test_sub_collections_do_not_mix(self, store, seed):
        await seed("N1", chapters=(("c1", 1), ("c2", 2)))
        await seed("N2", chapters=(("c1", 1),))
        assert len(await store.query("novels/N1/chapters")) == 2
        assert len(await store.query("novels/N2/chapters")) == 1

    @pytest.mark.asyncio
    async def test_ensure_indexes(self, store):
        await store.ensure_indexes()


class TestDriverErrors:
    @pytest.mark.asyncio
    async def test_driver_error_wrapped(self):
        collection = MagicMock()
        collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")
        database = MagicMock()
        database.__getitem__.return_value = collection

        with pytest.raises(StoreError) as exc_info:
            await DocumentStore(database).get("novels", "N1")
        assert exc_info.value.details["path"] == "novels"
