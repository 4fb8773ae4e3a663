"""Document store over a motor database, addressed by collection paths.

A collection path is a slash-separated string with an odd number of segments:
``novels``, ``novels/{novelId}/chapters``, ``users/{userId}/library``. Each
path lives in the MongoDB collection named by its last segment. A document's
``_id`` is its full path, and ``_parent`` holds the path of the document that
owns the sub-collection, so chapters of different novels share one Mongo
collection without colliding.
"""

import functools
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from exceptions import NotFoundError, StoreError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Filter = Tuple[str, str, Any]
OrderBy = Tuple[str, str]

_INTERNAL_KEYS = ("_id", "_parent", "_key")

_FILTER_OPS = {
    "==": "$eq",
    "!=": "$ne",
    "<": "$lt",
    "<=": "$lte",
    ">": "$gt",
    ">=": "$gte",
    "in": "$in",
}

_DIRECTIONS = {"asc": ASCENDING, "desc": DESCENDING}

# Sub-collections queried by parent on every chapter or library read
_PARENT_INDEXED_COLLECTIONS = ("chapters", "library")


def split_path(path: str) -> Tuple[str, str]:
    """Return (mongo collection name, parent path) for a collection path."""
    segments = [s for s in path.strip("/").split("/") if s]
    if not segments or len(segments) % 2 == 0:
        raise ValueError(f"Not a collection path: {path!r}")
    return segments[-1], "/".join(segments[:-1])


def doc_path(path: str, doc_id: str) -> str:
    return f"{path.strip('/')}/{doc_id}"


def build_query(parent: str, filters: Iterable[Filter]) -> Dict[str, Any]:
    query: Dict[str, Any] = {"_parent": parent}
    for field, op, value in filters:
        if field in _INTERNAL_KEYS:
            raise ValueError(f"Cannot filter on internal field {field!r}")
        clause = query.setdefault(field, {})
        if op == "array-contains":
            clause.setdefault("$all", []).append(value)
        elif op in _FILTER_OPS:
            clause[_FILTER_OPS[op]] = list(value) if op == "in" else value
        else:
            raise ValueError(f"Unsupported filter operator {op!r}")
    return query


def build_sort(order_by: Iterable[OrderBy]) -> List[Tuple[str, int]]:
    sort = []
    for field, direction in order_by:
        try:
            sort.append((field, _DIRECTIONS[direction.lower()]))
        except KeyError:
            raise ValueError(f"Unsupported sort direction {direction!r}") from None
    return sort


def serialize(raw: Optional[Dict[str, Any]]) -> Optional[Document]:
    if raw is None:
        return None
    out = {k: v for k, v in raw.items() if k not in _INTERNAL_KEYS}
    out["id"] = raw["_key"]
    return out


def _strip(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k != "id" and k not in _INTERNAL_KEYS}


def _store_errors(operation: str):
    """Wrap driver failures of a store coroutine in StoreError."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, path, *args, **kwargs):
            try:
                return await func(self, path, *args, **kwargs)
            except PyMongoError as e:
                raise StoreError(f"{operation} failed", {"path": path, "error": str(e)}) from e
        return wrapper

    return decorator


class DocumentStore:
    """Async CRUD over collection paths."""

    def __init__(self, database):
        self.database = database

    def _collection(self, path: str):
        name, parent = split_path(path)
        return self.database[name], parent

    async def ensure_indexes(self) -> None:
        for name in _PARENT_INDEXED_COLLECTIONS:
            await self.database[name].create_index("_parent")
        logger.debug("Parent indexes ensured on %s", ", ".join(_PARENT_INDEXED_COLLECTIONS))

    @_store_errors("get")
    async def get(self, path: str, doc_id: str) -> Optional[Document]:
        collection, _ = self._collection(path)
        return serialize(await collection.find_one({"_id": doc_path(path, doc_id)}))

    @_store_errors("query")
    async def query(
        self,
        path: str,
        filters: Sequence[Filter] = (),
        order_by: Sequence[OrderBy] = (),
        limit: Optional[int] = None,
    ) -> List[Document]:
        collection, parent = self._collection(path)
        cursor = collection.find(build_query(parent, filters))
        sort = build_sort(order_by)
        if sort:
            cursor = cursor.sort(sort)
        if limit is not None:
            cursor = cursor.limit(limit)

        documents = []
        async for raw in cursor:
            documents.append(serialize(raw))
        return documents

    @_store_errors("add")
    async def add(self, path: str, fields: Dict[str, Any]) -> str:
        collection, parent = self._collection(path)
        doc_id = str(ObjectId())
        await collection.insert_one(
            {**_strip(fields), "_id": doc_path(path, doc_id), "_parent": parent, "_key": doc_id}
        )
        return doc_id

    @_store_errors("set")
    async def set(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        collection, parent = self._collection(path)
        await collection.update_one(
            {"_id": doc_path(path, doc_id)},
            {"$set": {**_strip(fields), "_parent": parent, "_key": doc_id}},
            upsert=True,
        )

    @_store_errors("update")
    async def update(self, path: str, doc_id: str, fields: Dict[str, Any]) -> None:
        collection, _ = self._collection(path)
        update_fields = _strip(fields)
        if not update_fields:
            return
        result = await collection.update_one({"_id": doc_path(path, doc_id)}, {"$set": update_fields})
        if result.matched_count == 0:
            raise NotFoundError("Document", doc_path(path, doc_id))

    @_store_errors("delete")
    async def delete(self, path: str, doc_id: str) -> bool:
        collection, _ = self._collection(path)
        result = await collection.delete_one({"_id": doc_path(path, doc_id)})
        return result.deleted_count > 0

    @_store_errors("increment")
    async def increment(self, path: str, doc_id: str, field: str, delta: int = 1) -> None:
        collection, _ = self._collection(path)
        result = await collection.update_one({"_id": doc_path(path, doc_id)}, {"$inc": {field: delta}})
        if result.matched_count == 0:
            raise NotFoundError("Document", doc_path(path, doc_id))
