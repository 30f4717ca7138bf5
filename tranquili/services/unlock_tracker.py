# unlock tracker — caller-side diffing of evaluator results
# the first observation after load is a silent baseline; later observations
# report only achievements that moved from locked to unlocked.
# state round-trips through the achievement_state collection between requests.

import logging
from collections import deque
from datetime import datetime, timezone
from typing import Iterable, Optional

from pymongo.errors import DuplicateKeyError

from tranquili.models.achievement import AchievementStatus
from tranquili.services.achievements import ACHIEVEMENTS, unlocked_ids

logger = logging.getLogger(__name__)


def diff_unlocks(previous_ids: Iterable[str], statuses: Iterable[AchievementStatus]) -> list[AchievementStatus]:
    """statuses that are unlocked now but were not in previous_ids, in catalog order"""
    seen = set(previous_ids)
    return [s for s in statuses if s.unlocked and s.id not in seen]


class UnlockTracker:
    """remembers the last unlocked set for one user"""

    def __init__(self, unlocked: Optional[Iterable[str]] = None, initialized: bool = False):
        self.unlocked: set[str] = set(unlocked or [])
        self.initialized = initialized

    def observe(self, statuses: list[AchievementStatus]) -> list[AchievementStatus]:
        """record a fresh evaluation and return the newly unlocked achievements"""
        current = unlocked_ids(statuses)

        if not self.initialized:
            # first sync after load: pre-existing achievements are not news
            self.unlocked = current
            self.initialized = True
            return []

        new_unlocks = diff_unlocks(self.unlocked, statuses)
        self.unlocked = current
        return new_unlocks

    def reset(self):
        self.unlocked = set()
        self.initialized = False


class NotificationQueue:
    """fifo of unlocked achievements waiting to be shown"""

    def __init__(self, items: Optional[Iterable[AchievementStatus]] = None):
        self._items: deque[AchievementStatus] = deque(items or [])

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    def push_many(self, items: Iterable[AchievementStatus]):
        self._items.extend(items)

    def peek(self) -> Optional[AchievementStatus]:
        return self._items[0] if self._items else None

    def dismiss(self) -> Optional[AchievementStatus]:
        """drop the head of the queue (the popup was closed)"""
        return self._items.popleft() if self._items else None

    def clear(self):
        self._items.clear()

    def ids(self) -> list[str]:
        return [item.id for item in self._items]


# persistence helpers
# writes are conditioned on the unlocked set that was read, so two concurrent
# requests cannot both report the same unlock

_CATALOG_BY_ID = {definition.id: definition for definition in ACHIEVEMENTS}

MAX_SYNC_ATTEMPTS = 3


def _queue_from_ids(ids: Iterable[str]) -> NotificationQueue:
    """rebuild a queue from stored ids, skipping ids no longer in the catalog"""
    return NotificationQueue(
        AchievementStatus(**_CATALOG_BY_ID[i].model_dump(), unlocked=True)
        for i in ids
        if i in _CATALOG_BY_ID
    )


def _state_from_doc(doc: Optional[dict]) -> tuple[UnlockTracker, NotificationQueue]:
    if not doc:
        return UnlockTracker(), NotificationQueue()

    tracker = UnlockTracker(
        unlocked=doc.get("unlocked_ids", []),
        initialized=bool(doc.get("initialized", False)),
    )
    return tracker, _queue_from_ids(doc.get("pending", []))


async def load_state(user_id: str, db) -> tuple[UnlockTracker, NotificationQueue]:
    """load the tracker and pending queue for a user, empty if never synced"""
    doc = await db.achievement_state.find_one({"user_id": user_id})
    return _state_from_doc(doc)


async def sync_user(user_id: str, statuses: list[AchievementStatus], db) -> tuple[list[AchievementStatus], bool]:
    """run the tracker for a user against a fresh evaluation.
    queues and returns new unlocks, plus whether this was the silent baseline.
    retries when another request changed the stored set in between."""
    for _ in range(MAX_SYNC_ATTEMPTS):
        doc = await db.achievement_state.find_one({"user_id": user_id})
        tracker, _ = _state_from_doc(doc)
        baseline = not tracker.initialized
        previous = sorted(tracker.unlocked)

        new_unlocks = tracker.observe(statuses)

        update = {"$set": {
            "user_id": user_id,
            "unlocked_ids": sorted(tracker.unlocked),
            "initialized": tracker.initialized,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }}
        if new_unlocks:
            update["$push"] = {"pending": {"$each": [a.id for a in new_unlocks]}}

        try:
            if doc is None:
                result = await db.achievement_state.update_one({"user_id": user_id}, update, upsert=True)
                written = True
            else:
                result = await db.achievement_state.update_one(
                    {"user_id": user_id, "unlocked_ids": previous}, update
                )
                written = result.matched_count > 0
        except DuplicateKeyError:
            # another request created the state document first
            written = False

        if written:
            if new_unlocks:
                logger.info(f"User {user_id} unlocked: {', '.join(a.id for a in new_unlocks)}")
            elif baseline:
                logger.info(f"Achievement baseline recorded for user {user_id} ({len(tracker.unlocked)} unlocked)")
            return new_unlocks, baseline

        logger.info(f"Achievement state for user {user_id} changed during sync, retrying")

    logger.warning(f"Gave up syncing achievements for user {user_id} after {MAX_SYNC_ATTEMPTS} attempts")
    return [], False


async def dismiss_head(user_id: str, db) -> bool:
    """drop the oldest pending notification. false when the queue is empty."""
    result = await db.achievement_state.update_one(
        {"user_id": user_id, "pending.0": {"$exists": True}},
        {"$pop": {"pending": -1}},
    )
    return result.modified_count > 0
