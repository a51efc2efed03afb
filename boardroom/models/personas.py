"""Persona model for AI board members."""

from sqlalchemy import Column, Integer, String, Boolean, Text, ForeignKey, Index
from sqlalchemy.orm import relationship

from boardroom.config.database import Base
from .base import TimestampMixin


class Persona(Base, TimestampMixin):
    """
    AI board member personalities.

    The system prompt is resolved once from the personality tag and the
    optional custom description, at creation or update time.
    Deleting a persona only clears is_active so historical messages keep
    a valid sender.
    """

    __tablename__ = "personas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    name = Column(String(100), nullable=False)
    personality = Column(String(50), nullable=False)  # PersonalityKind value
    description = Column(Text, nullable=True)  # Shown on the member card
    custom_description = Column(Text, nullable=True)  # Free-text personality
    avatar_url = Column(String(500), nullable=True)

    # Resolved system prompt
    system_prompt = Column(Text, nullable=False)

    # Status
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    owner = relationship("User", back_populates="personas")

    __table_args__ = (
        Index("idx_personas_owner_active", "owner_id", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Persona(id={self.id}, name={self.name})>"
