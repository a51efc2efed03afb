"""Pydantic schemas for Conversation and Message endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from boardroom.models import Message
from .base import CamelModel


class ConversationCreate(CamelModel):
    """Schema for creating a conversation."""

    title: Optional[str] = Field(default=None, max_length=255)


class ConversationResponse(CamelModel):
    """Schema for conversation response."""

    id: int
    title: str
    created_at: datetime
    last_activity_at: datetime


class MessageResponse(CamelModel):
    """Schema for a persisted message."""

    id: int
    conversation_id: int
    sender_type: str
    sender_id: Optional[int] = None
    content: str
    message_type: str
    metadata: dict[str, Any] = {}
    created_at: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        # Built by hand: Message.metadata is the SQLAlchemy MetaData object
        return cls(
            id=message.id,
            conversation_id=message.conversation_id,
            sender_type=message.sender_type,
            sender_id=message.sender_id,
            content=message.content,
            message_type=message.message_type,
            metadata=message.extra,
            created_at=message.created_at,
        )
