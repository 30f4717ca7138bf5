# chat models — stored conversation turns
# mirrors the client's ChatMessage type (text turns only)

from typing import Literal, Optional
from pydantic import BaseModel, Field

from tranquili.config import settings
from tranquili.models.achievement import AchievementStatus


class ChatMessageCreate(BaseModel):
    role: Literal["user", "model"] = Field("user", description="who wrote the turn")
    text: str = Field(..., min_length=1, max_length=settings.CHAT_MESSAGE_MAX_LENGTH)


class ChatMessageResponse(BaseModel):
    id: str
    role: str
    text: str
    image: Optional[str] = None
    timestamp: int


class ChatMessageSubmitResponse(BaseModel):
    message: ChatMessageResponse
    new_achievements: list[AchievementStatus] = Field(default_factory=list, alias="newAchievements")

    model_config = {"populate_by_name": True}


class ChatCountResponse(BaseModel):
    count: int = 0
