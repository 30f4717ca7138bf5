# moods router — daily check-in, history, and per-category summary
# one entry per user per calendar day

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo.errors import DuplicateKeyError

from tranquili.config import settings
from tranquili.models.mood import (
    MOOD_OPTIONS,
    MoodCheckinResponse,
    MoodCreate,
    MoodEntryResponse,
    MoodSummary,
)
from tranquili.services.db import Database, get_db
from tranquili.dependencies import get_current_user
from tranquili.routers.achievements import baseline_before_write, sync_after_change

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/moods", tags=["moods"])


def _doc_to_entry(doc: dict) -> MoodEntryResponse:
    """convert a mongodb mood document to response model"""
    return MoodEntryResponse(
        id=str(doc.get("_id", "")),
        date=str(doc.get("date", "")),
        mood=str(doc.get("mood", "")),
        createdAt=doc.get("created_at"),
    )


@router.get("", response_model=list[MoodEntryResponse])
async def list_moods(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """the user's mood history, oldest first"""
    cursor = db.mood_history.find({"user_id": current_user["id"]}).sort("date", 1)
    docs = await cursor.to_list(length=settings.MOOD_HISTORY_LIMIT)
    return [_doc_to_entry(doc) for doc in docs]


@router.post("", response_model=MoodCheckinResponse, status_code=status.HTTP_201_CREATED)
async def check_in_mood(
    payload: MoodCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """record today's mood (or the given day's) and report any new achievements"""
    user_id = current_user["id"]
    today = datetime.now(timezone.utc).date()
    day = payload.date or today

    if day > today:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Mood date cannot be in the future",
        )

    date_str = day.isoformat()
    existing = await db.mood_history.find_one({"user_id": user_id, "date": date_str})
    if existing:
        logger.info(f"Duplicate check-in rejected for user {user_id} on {date_str}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Mood already recorded for this day",
        )

    doc = {
        "user_id": user_id,
        "date": date_str,
        "mood": payload.mood,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    await baseline_before_write(user_id, db)
    try:
        result = await db.mood_history.insert_one(doc)
    except DuplicateKeyError:
        # a concurrent check-in for the same day won the unique index
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Mood already recorded for this day",
        )
    doc["_id"] = result.inserted_id
    logger.info(f"Mood '{payload.mood}' recorded for user {user_id} on {date_str}")

    new_unlocks = await sync_after_change(user_id, db)
    return MoodCheckinResponse(entry=_doc_to_entry(doc), newAchievements=new_unlocks)


@router.get("/summary", response_model=MoodSummary)
async def mood_summary(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """count per mood category and the most frequent one"""
    cursor = db.mood_history.find({"user_id": current_user["id"]}, {"mood": 1, "_id": 0})
    docs = await cursor.to_list(length=None)

    counts = {mood: 0 for mood in MOOD_OPTIONS}
    for doc in docs:
        mood = doc.get("mood")
        if isinstance(mood, str) and mood in counts:
            counts[mood] += 1

    total = sum(counts.values())
    predominant = None
    if total:
        # max keeps the first of equal counts, so ties follow MOOD_OPTIONS order
        predominant = max(MOOD_OPTIONS, key=lambda m: counts[m])

    return MoodSummary(counts=counts, total=total, predominantMood=predominant)
