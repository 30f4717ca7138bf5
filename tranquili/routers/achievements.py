# achievements router — evaluated status, unlock sync, and notification queue
# status is always recomputed from the mood log and chat count; only the
# notification bookkeeping lives in achievement_state

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from tranquili.models.achievement import (
    AchievementListResponse,
    AchievementStatus,
    AchievementSyncResponse,
    NotificationQueueResponse,
)
from tranquili.models.mood import MoodEntry
from tranquili.services.achievements import evaluate, unlocked_ids
from tranquili.services.db import Database, get_db
from tranquili.services.unlock_tracker import dismiss_head, load_state, sync_user
from tranquili.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/achievements", tags=["achievements"])


async def load_mood_log(user_id: str, db: Database) -> list[MoodEntry]:
    """the user's full mood history as evaluator input. never truncated,
    streaks need every day on record."""
    cursor = db.mood_history.find({"user_id": user_id}, {"date": 1, "mood": 1, "_id": 0})
    docs = await cursor.to_list(length=None)
    return [MoodEntry(date=doc.get("date"), mood=doc.get("mood")) for doc in docs]


async def evaluate_user(user_id: str, db: Database) -> list[AchievementStatus]:
    mood_log = await load_mood_log(user_id, db)
    chat_count = await db.chat_messages.count_documents({"user_id": user_id})
    return evaluate(mood_log, chat_count)


async def baseline_before_write(user_id: str, db: Database):
    """record the silent baseline from data as loaded, before the user's first write,
    so achievements earned by that write are still announced"""
    tracker, _ = await load_state(user_id, db)
    if not tracker.initialized:
        statuses = await evaluate_user(user_id, db)
        await sync_user(user_id, statuses, db)


async def sync_after_change(user_id: str, db: Database) -> list[AchievementStatus]:
    """re-evaluate after a mood or chat write and queue whatever it unlocked"""
    statuses = await evaluate_user(user_id, db)
    new_unlocks, _ = await sync_user(user_id, statuses, db)
    return new_unlocks


@router.get("", response_model=AchievementListResponse)
async def list_achievements(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """every catalog achievement with its current unlock status"""
    statuses = await evaluate_user(current_user["id"], db)
    return AchievementListResponse(
        achievements=statuses,
        unlockedCount=len(unlocked_ids(statuses)),
        total=len(statuses),
    )


@router.post("/sync", response_model=AchievementSyncResponse)
async def sync_achievements(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """diff current unlocks against the last synced set.
    the first sync for a user records a baseline and reports nothing."""
    statuses = await evaluate_user(current_user["id"], db)
    new_unlocks, baseline = await sync_user(current_user["id"], statuses, db)
    return AchievementSyncResponse(newUnlocks=new_unlocks, baseline=baseline)


@router.get("/notifications", response_model=NotificationQueueResponse)
async def list_notifications(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """achievements waiting to be shown, oldest first"""
    _, queue = await load_state(current_user["id"], db)
    return NotificationQueueResponse(pending=list(queue))


@router.post("/notifications/dismiss", response_model=NotificationQueueResponse)
async def dismiss_notification(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """drop the oldest pending notification and return what remains"""
    if not await dismiss_head(current_user["id"], db):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No pending achievement notifications",
        )

    _, queue = await load_state(current_user["id"], db)
    return NotificationQueueResponse(pending=list(queue))


@router.delete("/state", status_code=status.HTTP_204_NO_CONTENT)
async def reset_achievement_state(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """forget the synced baseline and pending queue (logout).
    the next sync is silent again."""
    await db.achievement_state.delete_one({"user_id": current_user["id"]})
    logger.info(f"Achievement state reset for user {current_user['id']}")
