"""Message model for the conversation log."""

import json
from typing import Any

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from boardroom.config.database import Base
from .base import utcnow

SENDER_USER = "user"
SENDER_PERSONA = "persona"

MESSAGE_TYPES = ("text", "image", "audio")


class Message(Base):
    """
    Conversation log.

    Messages are immutable once written and ordered by (created_at, id)
    within a conversation.
    """

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Integer,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Sender: user (sender_id NULL) or persona
    sender_type = Column(String(20), nullable=False)
    sender_id = Column(Integer, ForeignKey("personas.id"), nullable=True)

    content = Column(Text, nullable=False)
    message_type = Column(String(20), nullable=False, default="text")  # text, image, audio

    # JSON: attachment url/mimeType/size, followUpQuestions
    extra_data = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("Persona")

    __table_args__ = (
        Index("idx_messages_conversation_created", "conversation_id", "created_at"),
    )

    @property
    def extra(self) -> dict[str, Any]:
        if not self.extra_data:
            return {}
        try:
            return json.loads(self.extra_data)
        except ValueError:
            return {}

    @extra.setter
    def extra(self, value: dict[str, Any] | None) -> None:
        self.extra_data = json.dumps(value) if value else None

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, sender_type={self.sender_type})>"
