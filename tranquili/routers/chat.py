# chat router — stored conversation turns with the companion
# model replies are produced elsewhere and posted back here like any other turn

import logging
import time
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tranquili.models.chat import (
    ChatCountResponse,
    ChatMessageCreate,
    ChatMessageResponse,
    ChatMessageSubmitResponse,
)
from tranquili.services.db import Database, get_db
from tranquili.dependencies import get_current_user
from tranquili.routers.achievements import baseline_before_write, sync_after_change

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/chat", tags=["chat"])


def _doc_to_message(doc: dict) -> ChatMessageResponse:
    """convert a mongodb chat document to response model"""
    return ChatMessageResponse(
        id=doc.get("message_id", str(doc.get("_id", ""))),
        role=doc.get("role", "user"),
        text=doc.get("text", ""),
        image=doc.get("image"),
        timestamp=int(doc.get("timestamp", 0)),
    )


@router.get("/messages", response_model=list[ChatMessageResponse])
async def list_messages(
    limit: int = Query(200, ge=1, le=1000),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """stored conversation turns, oldest first"""
    cursor = db.chat_messages.find({"user_id": current_user["id"]}).sort("timestamp", 1)
    docs = await cursor.to_list(length=limit)
    return [_doc_to_message(doc) for doc in docs]


@router.post("/messages", response_model=ChatMessageSubmitResponse, status_code=status.HTTP_201_CREATED)
async def add_message(
    payload: ChatMessageCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """append one conversation turn and report any new achievements"""
    user_id = current_user["id"]
    text = payload.text.strip()
    if not text:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Message text cannot be blank",
        )

    doc = {
        "message_id": str(uuid.uuid4()),
        "user_id": user_id,
        "role": payload.role,
        "text": text,
        "timestamp": int(time.time() * 1000),
    }
    await baseline_before_write(user_id, db)
    await db.chat_messages.insert_one(doc)
    logger.info(f"Stored {payload.role} chat turn for user {user_id}")

    new_unlocks = await sync_after_change(user_id, db)
    return ChatMessageSubmitResponse(message=_doc_to_message(doc), newAchievements=new_unlocks)


@router.get("/count", response_model=ChatCountResponse)
async def count_messages(
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """chat activity count, as fed to the achievement evaluator"""
    count = await db.chat_messages.count_documents({"user_id": current_user["id"]})
    return ChatCountResponse(count=count)
