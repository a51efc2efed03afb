"""Setting model for system configuration key-value store."""

from sqlalchemy import Column, Integer, String, DateTime, Text, Index
from sqlalchemy.sql.elements import quoted_name

from boardroom.config.database import Base
from .base import utcnow


class Setting(Base):
    """
    System configuration key-value store.

    Stores application settings that can be modified at runtime by admins.
    """

    __tablename__ = "settings"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Use quoted_name to properly escape 'key' which is a SQL Server reserved word
    key = Column(quoted_name('key', quote=True), String(100), nullable=False, unique=True)
    value = Column(Text, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, onupdate=utcnow)

    # Indexes - use quoted_name for index too
    __table_args__ = (
        Index("idx_settings_key", quoted_name('key', quote=True)),
    )

    def __repr__(self) -> str:
        return f"<Setting(key={self.key})>"


# Default settings to seed
DEFAULT_SETTINGS = {
    "welcome_message": ("Welcome to your AI Board of Directors", "Greeting shown on the home page"),
    "free_persona_limit": ("2", "Board members allowed on the free tier (informational)"),
    "premium_persona_limit": ("5", "Board members allowed on paid tiers (informational)"),
}
