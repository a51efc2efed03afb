"""Pydantic schemas for Persona endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from boardroom.services.personalities import PersonalityKind
from .base import CamelModel


class PersonaBase(CamelModel):
    """Base persona fields."""

    name: str = Field(min_length=1, max_length=100)
    personality: PersonalityKind = PersonalityKind.EMPATHETIC_COUNSELOR
    description: Optional[str] = None
    custom_description: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("personality", mode="before")
    @classmethod
    def coerce_personality(cls, value):
        # Unknown tags fall back to the default personality
        return PersonalityKind.parse(value)


class PersonaCreate(PersonaBase):
    """Schema for creating a persona."""


class PersonaUpdate(CamelModel):
    """Schema for updating a persona (all fields optional)."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    personality: Optional[PersonalityKind] = None
    description: Optional[str] = None
    custom_description: Optional[str] = None
    avatar_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("personality", mode="before")
    @classmethod
    def coerce_personality(cls, value):
        if value is None:
            return None
        return PersonalityKind.parse(value)


class PersonaResponse(CamelModel):
    """Schema for persona response."""

    id: int
    name: str
    personality: str
    description: Optional[str] = None
    custom_description: Optional[str] = None
    avatar_url: Optional[str] = None
    system_prompt: str
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class PersonaSummary(CamelModel):
    """Persona fields attached to each reply."""

    id: int
    name: str
    personality: str
    avatar_url: Optional[str] = None


class InitializePersonasResponse(CamelModel):
    """Result of seeding the default board."""

    message: str
    created: bool
    members: list[PersonaResponse]
