"""Persona (board member) CRUD endpoints."""

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from boardroom.config.database import get_db
from boardroom.models import User
from boardroom.schemas.personas import (
    PersonaCreate,
    PersonaUpdate,
    PersonaResponse,
    InitializePersonasResponse,
)
from boardroom.services import persona_service
from boardroom.services.rbac import get_current_user

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=list[PersonaResponse])
async def list_personas(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List the caller's active board members."""
    personas = persona_service.list_active(db, user.id)
    return [PersonaResponse.model_validate(p) for p in personas]


@router.post("/initialize", response_model=InitializePersonasResponse)
async def initialize_personas(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Seed the default board on first run; a no-op once any member exists."""
    personas, created = persona_service.initialize_defaults(db, user)
    return InitializePersonasResponse(
        message="Default board members created" if created else "Board members already initialized",
        created=created,
        members=[PersonaResponse.model_validate(p) for p in personas],
    )


@router.get("/{persona_id}", response_model=PersonaResponse)
async def get_persona(
    persona_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Get a persona by ID."""
    return PersonaResponse.model_validate(persona_service.get_owned(db, user.id, persona_id))


@router.post("", response_model=PersonaResponse, status_code=201)
async def create_persona(
    data: PersonaCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a new persona, subject to the subscription cap."""
    persona = persona_service.create_persona(db, user, data)
    return PersonaResponse.model_validate(persona)


@router.patch("/{persona_id}", response_model=PersonaResponse)
async def update_persona(
    persona_id: int,
    data: PersonaUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Update a persona."""
    persona = persona_service.update_persona(db, user, persona_id, data)
    return PersonaResponse.model_validate(persona)


@router.delete("/{persona_id}", status_code=204)
async def delete_persona(
    persona_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Delete a persona (soft delete)."""
    persona_service.deactivate_persona(db, user, persona_id)
