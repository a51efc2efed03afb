"""Pydantic schemas for admin Settings and analytics endpoints."""

from datetime import datetime
from typing import Optional

from .base import CamelModel


class SettingResponse(CamelModel):
    """A single runtime setting."""

    key: str
    value: str
    description: Optional[str] = None
    updated_at: Optional[datetime] = None


class SettingUpdate(CamelModel):
    """Schema for updating a setting."""

    value: str
    description: Optional[str] = None


class AnalyticsResponse(CamelModel):
    """Admin dashboard counters."""

    total_users: int
    today_messages: int
    premium_users: int
    conversion_rate: float
