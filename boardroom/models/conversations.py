"""Conversation model."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from boardroom.config.database import Base
from .base import utcnow


class Conversation(Base):
    """
    A shared conversation between a user and their board.

    Only last_activity_at changes after creation; it is touched on every
    new message from the user or any persona.
    """

    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    title = Column(String(255), nullable=False, default="New conversation")

    created_at = Column(DateTime, default=utcnow, nullable=False)
    last_activity_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    owner = relationship("User", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
    )

    __table_args__ = (
        Index("idx_conversations_owner_activity", "owner_id", "last_activity_at"),
    )

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, owner_id={self.owner_id})>"
