from fastapi import APIRouter, Depends
from typing import Optional

from config import EXPLORE_LIMIT, RANKING_LIMIT
from document_store import DocumentStore
from exceptions import NotFoundError, PermissionDenied, ValidationFailure
from models.genre_models import Genre
from models.novel_models import CreateNovelModel, UpdateNovelModel
from routes.dependencies import (
    get_counters, get_optional_user, get_resolver, get_store, require_user,
)
from tracking import CounterUpdater, SessionStateResolver, UserIdentity, library_path
from tracking.counter_updater import chapters_path
from utils import utcnow

router = APIRouter(tags=["novels"])


def chapter_summary(chapter: dict) -> dict:
    return {k: v for k, v in chapter.items() if k != "content"}


async def load_novel(store: DocumentStore, novel_id: str) -> dict:
    novel = await store.get("novels", novel_id)
    if novel is None:
        raise NotFoundError("Novel", novel_id)
    return novel


async def load_owned_novel(store: DocumentStore, novel_id: str, user: UserIdentity) -> dict:
    novel = await load_novel(store, novel_id)
    if novel.get("uploadBy") != user.user_id:
        raise PermissionDenied("Only the author can change this novel")
    return novel


async def top_novels(store: DocumentStore, genre: Optional[Genre], limit: int) -> list:
    filters = [("genre", "array-contains", genre.value)] if genre else []
    return await store.query("novels", filters=filters, order_by=[("views", "desc")], limit=limit)


@router.get("/novels/explore")
async def explore_novels(genre: Optional[Genre] = None, store: DocumentStore = Depends(get_store)):
    novels = await top_novels(store, genre, EXPLORE_LIMIT)
    return {
        "genre": genre.value if genre else "All",
        "total_novels": len(novels),
        "novels": novels,
    }


@router.get("/novels/ranking")
async def novel_ranking(genre: Optional[Genre] = None, store: DocumentStore = Depends(get_store)):
    novels = await top_novels(store, genre, RANKING_LIMIT)
    return {
        "genre": genre.value if genre else "All",
        "ranking": [{"rank": i + 1, "novel": novel} for i, novel in enumerate(novels)],
    }


@router.post("/novels", status_code=201)
async def create_novel(
    novel: CreateNovelModel,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    novel_data = novel.model_dump(mode="json")
    novel_data.update({"views": 0, "uploadBy": user.user_id, "createdAt": utcnow()})
    novel_id = await store.add("novels", novel_data)
    return {
        "message": "Novel created successfully",
        "novel": await store.get("novels", novel_id),
    }


@router.get("/novels/{novel_id}")
async def get_novel_detail(
    novel_id: str,
    user: Optional[UserIdentity] = Depends(get_optional_user),
    store: DocumentStore = Depends(get_store),
    counters: CounterUpdater = Depends(get_counters),
    resolver: SessionStateResolver = Depends(get_resolver),
):
    novel = await load_novel(store, novel_id)
    counters.novel_viewed(novel_id)

    chapters = await resolver.load_chapters(novel_id)

    library_entry = None
    if user is not None:
        library_entry = await store.get(library_path(user.user_id), novel_id)

    return {
        "novel": novel,
        "chapters": [chapter_summary(c) for c in chapters],
        "total_chapters": len(chapters),
        "inLibrary": bool(library_entry and library_entry.get("inLibrary")),
        "lastReadChapter": library_entry.get("lastReadChapter") if library_entry else None,
    }


@router.put("/novels/{novel_id}")
async def update_novel(
    novel_id: str,
    updated_data: UpdateNovelModel,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    await load_owned_novel(store, novel_id, user)
    update_fields = updated_data.model_dump(mode="json", exclude_unset=True)
    update_fields = {k: v for k, v in update_fields.items() if v is not None}
    if not update_fields:
        raise ValidationFailure("No fields provided to update")
    update_fields["updatedAt"] = utcnow()

    await store.update("novels", novel_id, update_fields)
    return {
        "message": "Novel updated successfully",
        "novel": await store.get("novels", novel_id),
    }


@router.delete("/novels/{novel_id}")
async def delete_novel(
    novel_id: str,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    await load_owned_novel(store, novel_id, user)
    chapters = await store.query(chapters_path(novel_id))
    for chapter in chapters:
        await store.delete(chapters_path(novel_id), chapter["id"])
    await store.delete("novels", novel_id)
    return {"message": "Novel deleted successfully", "deleted_chapters": len(chapters)}


@router.get("/users/{user_id}/novels")
async def get_user_novels(user_id: str, store: DocumentStore = Depends(get_store)):
    novels = await store.query(
        "novels", filters=[("uploadBy", "==", user_id)], order_by=[("createdAt", "desc")]
    )
    return {"user_id": user_id, "total_novels": len(novels), "novels": novels}
