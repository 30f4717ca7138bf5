# mood models — daily check-in entries and summary view
# mirrors the client's MoodEntry type

import datetime as dt
from typing import Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator

from tranquili.models.achievement import AchievementStatus

Mood = Literal["happy", "calm", "neutral", "sad", "anxious"]

# display order on the client, also the tie-break order for the predominant mood
MOOD_OPTIONS: tuple[str, ...] = ("happy", "calm", "neutral", "sad", "anxious")


class MoodEntry(BaseModel):
    """one self-reported mood on one calendar day.
    lenient on purpose: stored documents are read back as-is and the
    achievement evaluator decides what counts."""
    date: Union[str, dt.datetime, dt.date, None] = None
    mood: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _drop_non_calendar_date(cls, value):
        # ints would otherwise coerce to unix timestamps
        return value if isinstance(value, (str, dt.date)) else None

    @field_validator("mood", mode="before")
    @classmethod
    def _drop_non_text_mood(cls, value):
        return value if isinstance(value, str) else None


class MoodCreate(BaseModel):
    """payload for the daily mood check-in"""
    mood: Mood = Field(..., description="mood category")
    date: Optional[dt.date] = Field(None, description="calendar day, defaults to today (utc)")


class MoodEntryResponse(BaseModel):
    id: str
    date: str
    mood: str
    created_at: Optional[str] = Field(None, alias="createdAt")

    model_config = {"populate_by_name": True}


class MoodCheckinResponse(BaseModel):
    """response after a check-in: the stored entry plus anything it unlocked"""
    entry: MoodEntryResponse
    new_achievements: list[AchievementStatus] = Field(default_factory=list, alias="newAchievements")

    model_config = {"populate_by_name": True}


class MoodSummary(BaseModel):
    """per-category counts for the reports screen"""
    counts: dict[str, int]
    total: int = 0
    predominant_mood: Optional[str] = Field(None, alias="predominantMood")

    model_config = {"populate_by_name": True}
