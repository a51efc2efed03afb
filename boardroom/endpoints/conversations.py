"""Conversation endpoints."""

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from boardroom.config.database import get_db
from boardroom.models import User
from boardroom.schemas.base import PaginatedResponse, PaginationMeta
from boardroom.schemas.conversations import (
    ConversationCreate,
    ConversationResponse,
    MessageResponse,
)
from boardroom.services.conversation_store import ConversationStore
from boardroom.services.rbac import get_current_user

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=PaginatedResponse[ConversationResponse])
async def list_conversations(
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    user: User = Depends(get_current_user),
):
    """List conversations, most recently active first."""
    conversations, total = ConversationStore(db).list_conversations(user.id, page, per_page)

    return PaginatedResponse(
        data=[ConversationResponse.model_validate(c) for c in conversations],
        meta=PaginationMeta(
            page=page,
            per_page=per_page,
            total=total,
            total_pages=(total + per_page - 1) // per_page,
        ),
    )


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    data: ConversationCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a conversation."""
    conversation = ConversationStore(db).create_conversation(user.id, data.title)
    return ConversationResponse.model_validate(conversation)


@router.get("/latest", response_model=ConversationResponse)
async def latest_conversation(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Most recently active conversation, created if the user has none."""
    conversation = ConversationStore(db).get_or_create_latest(user.id)
    return ConversationResponse.model_validate(conversation)


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    conversation_id: int,
    limit: int | None = Query(None, ge=1, le=500, description="Only the last N messages"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Messages of a conversation, oldest first."""
    store = ConversationStore(db)
    conversation = store.get_owned(user.id, conversation_id)

    if limit is None:
        messages = store.list_messages(conversation.id)
    else:
        messages = store.recent_messages(conversation.id, limit)
    return [MessageResponse.from_message(m) for m in messages]
