"""SQLAlchemy ORM models for the AI Board of Directors.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from boardroom.config.database import Base

# Core models
from .users import User
from .personas import Persona
from .conversations import Conversation
from .messages import Message, SENDER_USER, SENDER_PERSONA, MESSAGE_TYPES

# Configuration models
from .settings import Setting, DEFAULT_SETTINGS

__all__ = [
    "Base",
    # Core
    "User",
    "Persona",
    "Conversation",
    "Message",
    "SENDER_USER",
    "SENDER_PERSONA",
    "MESSAGE_TYPES",
    # Configuration
    "Setting",
    "DEFAULT_SETTINGS",
]
