from fastapi import APIRouter, Depends

from document_store import DocumentStore
from exceptions import NotFoundError
from models.library_models import LibraryEntry
from routes.dependencies import ensure_self, get_store, require_user
from routes.novel_routes import load_novel
from tracking import UserIdentity, library_path
from utils import utcnow

router = APIRouter(tags=["library"])


@router.get("/users/{user_id}/library")
async def get_library(
    user_id: str,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    ensure_self(user_id, user)
    entries = await store.query(
        library_path(user_id),
        filters=[("inLibrary", "==", True)],
        order_by=[("addedAt", "desc")],
    )

    novels = []
    for entry in entries:
        novel = await store.get("novels", entry["id"])
        if novel is None:
            continue  # removed by its author since
        novels.append({
            "novel": novel,
            "lastReadChapter": entry.get("lastReadChapter"),
            "lastReadAt": entry.get("lastReadAt"),
            "addedAt": entry.get("addedAt"),
        })
    return {"user_id": user_id, "total_novels": len(novels), "novels": novels}


@router.get("/users/{user_id}/library/{novel_id}", response_model=LibraryEntry)
async def get_library_entry(
    user_id: str,
    novel_id: str,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    ensure_self(user_id, user)
    entry = await store.get(library_path(user_id), novel_id)
    if entry is None:
        raise NotFoundError("Library entry", novel_id)
    return entry


@router.post("/users/{user_id}/library/{novel_id}", status_code=201)
async def add_to_library(
    user_id: str,
    novel_id: str,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    ensure_self(user_id, user)
    await load_novel(store, novel_id)

    existing = await store.get(library_path(user_id), novel_id)
    if existing and existing.get("inLibrary"):
        return {"message": "Novel already in library", "entry": existing}

    # Keeps any reading progress recorded before the novel was added
    await store.set(library_path(user_id), novel_id, {
        "novelId": novel_id,
        "inLibrary": True,
        "addedAt": utcnow(),
    })
    return {
        "message": "Novel added to library",
        "entry": await store.get(library_path(user_id), novel_id),
    }


@router.delete("/users/{user_id}/library/{novel_id}")
async def remove_from_library(
    user_id: str,
    novel_id: str,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    ensure_self(user_id, user)
    if not await store.delete(library_path(user_id), novel_id):
        raise NotFoundError("Library entry", novel_id)
    return {"message": "Novel removed from library"}
