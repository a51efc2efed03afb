"""Pydantic schemas for chat submission (HTTP and WebSocket)."""

from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel
from .conversations import MessageResponse
from .personas import PersonaSummary

MessageKind = Literal["text", "image", "audio"]


class Attachment(CamelModel):
    """Uploaded media referenced by an image or audio message."""

    url: str = Field(min_length=1)
    mime_type: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)
    original_name: Optional[str] = None


class ChatSendRequest(CamelModel):
    """Body of POST /chat/send."""

    conversation_id: int
    content: str = ""
    persona_ids: list[int]
    message_type: MessageKind = "text"
    attachment: Optional[Attachment] = None


class PersonaReplyResponse(CamelModel):
    """One persona's persisted reply."""

    message: MessageResponse
    persona: PersonaSummary


class PersonaFailureResponse(CamelModel):
    """A persona that produced no reply this turn."""

    persona_id: int
    reason: str


class ChatSendResponse(CamelModel):
    """User message plus the replies of every persona that succeeded."""

    user_message: MessageResponse
    persona_results: list[PersonaReplyResponse]
    failures: list[PersonaFailureResponse] = []


class ChatMessageEvent(CamelModel):
    """Inbound `chat_message` event on the streaming channel."""

    type: Literal["chat_message"]
    conversation_id: int
    content: str = ""
    user_id: Optional[int] = None
    persona_ids: list[int]
    message_type: MessageKind = "text"
    attachment: Optional[Attachment] = None
