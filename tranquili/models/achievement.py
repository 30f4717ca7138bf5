# achievement models — catalog definitions and evaluated status

from pydantic import BaseModel, Field


class AchievementDefinition(BaseModel):
    """a named milestone from the fixed catalog"""
    id: str
    title: str
    description: str

    model_config = {"frozen": True}


class AchievementStatus(AchievementDefinition):
    """catalog entry plus whether current data unlocks it. computed, never stored."""
    unlocked: bool = False


class AchievementListResponse(BaseModel):
    achievements: list[AchievementStatus]
    unlocked_count: int = Field(0, alias="unlockedCount")
    total: int = 0

    model_config = {"populate_by_name": True}


class AchievementSyncResponse(BaseModel):
    """result of diffing the current unlocks against the last seen set"""
    new_unlocks: list[AchievementStatus] = Field(default_factory=list, alias="newUnlocks")
    baseline: bool = False

    model_config = {"populate_by_name": True}


class NotificationQueueResponse(BaseModel):
    pending: list[AchievementStatus] = Field(default_factory=list)
