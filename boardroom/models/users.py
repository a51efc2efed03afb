"""User model for account and subscription state."""

from sqlalchemy import Column, Integer, String, Boolean
from sqlalchemy.orm import relationship

from boardroom.config.database import Base
from .base import TimestampMixin


class User(Base, TimestampMixin):
    """
    Application user.

    Subscription tiers:
    - free: base tier (persona cap of FREE_PERSONA_LIMIT, no media)
    - premium / pro: paid tiers (higher persona cap, media sharing)

    Billing itself lives with the payment providers; only the resulting
    tier is stored here.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)

    subscription_tier = Column(String(20), nullable=False, default="free")
    is_admin = Column(Boolean, nullable=False, default=False)

    # Relationships
    personas = relationship("Persona", back_populates="owner")
    conversations = relationship("Conversation", back_populates="owner")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, tier={self.subscription_tier})>"
