import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from document_store import DocumentStore
from exceptions import NotFoundError, ValidationFailure
from models.chapter_models import AddChapterModel, UpdateChapterModel
from models.reader_models import ChapterView, ScrollEvent, ScrollResult
from routes.dependencies import get_optional_user, get_readers, get_resolver, get_store, require_user
from routes.novel_routes import chapter_summary, load_novel, load_owned_novel
from tracking import DetectorState, ReaderRegistry, ScrollMetrics, SessionStateResolver, UserIdentity
from tracking.counter_updater import chapters_path
from utils import utcnow

router = APIRouter(tags=["chapters"])


async def ensure_unique_number(
    store: DocumentStore, novel_id: str, chapter_number: int, chapter_id: Optional[str] = None
) -> None:
    clashes = await store.query(
        chapters_path(novel_id), filters=[("chapterNumber", "==", chapter_number)]
    )
    if any(c["id"] != chapter_id for c in clashes):
        raise ValidationFailure(
            f"Chapter {chapter_number} already exists", {"novel_id": novel_id}
        )


async def load_chapter(store: DocumentStore, novel_id: str, chapter_id: str) -> dict:
    chapter = await store.get(chapters_path(novel_id), chapter_id)
    if chapter is None:
        raise NotFoundError("Chapter", chapter_id)
    return chapter


def reader_key(user: Optional[UserIdentity], reader_id: Optional[str]):
    """Registry key and the id echoed back to the client.

    Each client page sends its own ``X-Reader-Id``, so two pages of the same
    signed-in user keep separate mounts.
    """
    if user is not None:
        if reader_id:
            return f"user:{user.user_id}:{reader_id}", reader_id
        return f"user:{user.user_id}", user.user_id
    reader_id = reader_id or uuid.uuid4().hex
    return f"anon:{reader_id}", reader_id


@router.get("/novels/{novel_id}/chapters")
async def list_chapters(
    novel_id: str,
    store: DocumentStore = Depends(get_store),
    resolver: SessionStateResolver = Depends(get_resolver),
):
    await load_novel(store, novel_id)
    chapters = await resolver.load_chapters(novel_id)
    return {
        "novel_id": novel_id,
        "total_chapters": len(chapters),
        "chapters": [chapter_summary(c) for c in chapters],
    }


@router.post("/novels/{novel_id}/chapters", status_code=201)
async def add_chapter(
    novel_id: str,
    chapter: AddChapterModel,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    await load_owned_novel(store, novel_id, user)
    await ensure_unique_number(store, novel_id, chapter.chapterNumber)

    chapter_data = chapter.model_dump()
    chapter_data.update({"views": 0, "uploadDate": utcnow()})
    chapter_id = await store.add(chapters_path(novel_id), chapter_data)
    return {
        "message": "Chapter added successfully",
        "chapter": await store.get(chapters_path(novel_id), chapter_id),
    }


@router.put("/novels/{novel_id}/chapters/{chapter_id}")
async def update_chapter(
    novel_id: str,
    chapter_id: str,
    updated_data: UpdateChapterModel,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    await load_owned_novel(store, novel_id, user)
    await load_chapter(store, novel_id, chapter_id)

    update_fields = {k: v for k, v in updated_data.model_dump(exclude_unset=True).items() if v is not None}
    if not update_fields:
        raise ValidationFailure("No fields provided to update")
    if "chapterNumber" in update_fields:
        await ensure_unique_number(store, novel_id, update_fields["chapterNumber"], chapter_id)

    await store.update(chapters_path(novel_id), chapter_id, update_fields)
    return {
        "message": "Chapter updated successfully",
        "chapter": await store.get(chapters_path(novel_id), chapter_id),
    }


@router.delete("/novels/{novel_id}/chapters/{chapter_id}")
async def delete_chapter(
    novel_id: str,
    chapter_id: str,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    await load_owned_novel(store, novel_id, user)
    if not await store.delete(chapters_path(novel_id), chapter_id):
        raise NotFoundError("Chapter", chapter_id)
    return {"message": "Chapter deleted successfully"}


@router.get("/novels/{novel_id}/chapters/{chapter_id}/read", response_model=ChapterView)
async def read_chapter(
    novel_id: str,
    chapter_id: str,
    x_reader_id: Optional[str] = Header(None),
    user: Optional[UserIdentity] = Depends(get_optional_user),
    readers: ReaderRegistry = Depends(get_readers),
):
    key, reader_id = reader_key(user, x_reader_id)
    navigation = await readers.navigate(key, user, novel_id, chapter_id)
    if navigation is None:
        raise HTTPException(status_code=409, detail="Superseded by a newer navigation")

    context = navigation.context
    if not context.found:
        raise NotFoundError("Chapter", chapter_id)

    return ChapterView(
        readerId=reader_id,
        mountId=navigation.mount.mount_id if navigation.mount else None,
        novel=context.novel,
        chapter=context.current,
        previousChapter=chapter_summary(context.previous) if context.previous else None,
        nextChapter=chapter_summary(context.next) if context.next else None,
    )


@router.post("/readers/mounts/{mount_id}/scroll", response_model=ScrollResult)
async def report_scroll(
    mount_id: str,
    event: ScrollEvent,
    readers: ReaderRegistry = Depends(get_readers),
):
    state = readers.scroll(
        mount_id, ScrollMetrics(event.scrollTop, event.clientHeight, event.scrollHeight)
    )
    return ScrollResult(mountId=mount_id, state=state.value, completed=state is DetectorState.COMPLETED)


@router.delete("/readers/mounts/{mount_id}")
async def unmount_chapter(mount_id: str, readers: ReaderRegistry = Depends(get_readers)):
    readers.unmount(mount_id)
    return {"message": "Unmounted", "mountId": mount_id}
