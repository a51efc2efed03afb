"""Pydantic schemas for authentication and user endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class LoginRequest(CamelModel):
    """Development sign-in: upserts the user by email."""

    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserResponse(CamelModel):
    """User profile response."""

    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    subscription_tier: str
    is_admin: bool
    persona_limit: int
    can_share_media: bool
    created_at: datetime


class LoginResponse(CamelModel):
    """Token issued on sign-in."""

    user: UserResponse
    access_token: str
    expires_in: int
