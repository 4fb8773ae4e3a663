from datetime import date, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends

from config import CURRENTLY_READING_LIMIT, STATS_WINDOW_DAYS
from document_store import DocumentStore
from exceptions import NotFoundError
from models.genre_models import genre_values
from models.profile_model import UserProfile
from models.stats_models import DailyReads, ReadingStats
from models.update_profile_model import UpdateUserProfile
from routes.dependencies import ensure_self, get_store, require_user
from tracking import UserIdentity, library_path
from utils import utcnow

router = APIRouter(tags=["profile"])


def last_days(today: date, count: int = STATS_WINDOW_DAYS) -> List[date]:
    """``count`` calendar days ending with ``today``, oldest first."""
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


async def daily_reads(store: DocumentStore, user_id: str, today: Optional[date] = None) -> List[DailyReads]:
    days = last_days(today or utcnow().date())
    readings = await store.query(
        "readings",
        filters=[("userId", "==", user_id), ("date", ">=", days[0].isoformat())],
    )
    counts = {}
    for reading in readings:
        counts[reading["date"]] = counts.get(reading["date"], 0) + reading.get("chaptersRead", 0)

    return [
        DailyReads(name=day.strftime("%a"), date=day.isoformat(), reads=counts.get(day.isoformat(), 0))
        for day in days
    ]


async def currently_reading(store: DocumentStore, user_id: str) -> List[dict]:
    entries = await store.query(
        library_path(user_id),
        filters=[("lastReadAt", "!=", None)],
        order_by=[("lastReadAt", "desc")],
        limit=CURRENTLY_READING_LIMIT,
    )
    novels = []
    for entry in entries:
        novel = await store.get("novels", entry["id"])
        if novel is not None:
            novels.append({**novel, "lastReadChapter": entry.get("lastReadChapter")})
    return novels


@router.get("/users/{user_id}", response_model=UserProfile)
async def get_user_profile(user_id: str, store: DocumentStore = Depends(get_store)):
    profile = await store.get("users", user_id)
    if profile is None:
        raise NotFoundError("User", user_id)
    return profile


@router.put("/users/{user_id}", response_model=UserProfile)
async def update_user_profile(
    user_id: str,
    updated_data: UpdateUserProfile,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    ensure_self(user_id, user)
    update_dict = updated_data.model_dump(exclude_unset=True)
    if "interestedGenres" in update_dict and update_dict["interestedGenres"] is not None:
        update_dict["interestedGenres"] = genre_values(update_dict["interestedGenres"])
    if "username" in update_dict and update_dict["username"] is None:
        del update_dict["username"]

    await store.update("users", user_id, update_dict)
    profile = await store.get("users", user_id)
    if profile is None:
        raise NotFoundError("User", user_id)
    return profile


@router.get("/users/{user_id}/stats", response_model=ReadingStats)
async def get_reading_stats(
    user_id: str,
    user: UserIdentity = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    ensure_self(user_id, user)
    return ReadingStats(
        userId=user_id,
        days=await daily_reads(store, user_id),
        currentlyReading=await currently_reading(store, user_id),
    )
