"""Board member (persona) management."""

from typing import Iterable

import structlog
from sqlalchemy.orm import Session

from boardroom.middleware.error_handler import NotFoundError
from boardroom.models import Persona, User
from boardroom.schemas.personas import PersonaCreate, PersonaUpdate
from boardroom.services.personalities import (
    DEFAULT_BOARD_SIZE,
    DEFAULT_PERSONAS,
    PersonalityKind,
    resolve_system_prompt,
)
from boardroom.services.subscriptions import ensure_persona_capacity

logger = structlog.get_logger()

# PATCH treats an explicit null on these as "leave unchanged"
NON_NULLABLE_FIELDS = ("name", "personality")


def list_active(db: Session, owner_id: int) -> list[Persona]:
    """Active personas of a user, oldest first."""
    return (
        db.query(Persona)
        .filter(Persona.owner_id == owner_id, Persona.is_active == True)  # noqa: E712
        .order_by(Persona.created_at, Persona.id)
        .all()
    )


def get_owned(db: Session, owner_id: int, persona_id: int) -> Persona:
    """Active persona owned by the user, or NotFoundError."""
    persona = (
        db.query(Persona)
        .filter(
            Persona.id == persona_id,
            Persona.owner_id == owner_id,
            Persona.is_active == True,  # noqa: E712
        )
        .first()
    )
    if not persona:
        raise NotFoundError("Persona", persona_id)
    return persona


def get_active_by_ids(db: Session, owner_id: int, persona_ids: Iterable[int]) -> dict[int, Persona]:
    """Map of id -> active persona owned by the user, for the requested ids."""
    ids = list(persona_ids)
    if not ids:
        return {}
    personas = (
        db.query(Persona)
        .filter(
            Persona.id.in_(ids),
            Persona.owner_id == owner_id,
            Persona.is_active == True,  # noqa: E712
        )
        .all()
    )
    return {p.id: p for p in personas}


def create_persona(db: Session, user: User, data: PersonaCreate) -> Persona:
    """Create a persona after checking the user's subscription cap."""
    ensure_persona_capacity(db, user)

    persona = Persona(
        owner_id=user.id,
        name=data.name,
        personality=data.personality.value,
        description=data.description,
        custom_description=data.custom_description,
        avatar_url=data.avatar_url,
        system_prompt=resolve_system_prompt(data.personality, data.custom_description),
        is_active=True,
    )
    db.add(persona)
    db.commit()
    db.refresh(persona)

    logger.info("Persona created", id=persona.id, owner_id=user.id, personality=persona.personality)
    return persona


def update_persona(db: Session, user: User, persona_id: int, data: PersonaUpdate) -> Persona:
    """Apply a partial update; the prompt is re-resolved if its inputs changed."""
    persona = get_owned(db, user.id, persona_id)
    update_data = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key not in NON_NULLABLE_FIELDS
    }

    if "personality" in update_data:
        update_data["personality"] = PersonalityKind.parse(update_data["personality"]).value

    for key, value in update_data.items():
        setattr(persona, key, value)

    if "personality" in update_data or "custom_description" in update_data:
        persona.system_prompt = resolve_system_prompt(
            persona.personality,
            persona.custom_description,
        )

    db.commit()
    db.refresh(persona)

    logger.info("Persona updated", id=persona.id, fields=sorted(update_data))
    return persona


def deactivate_persona(db: Session, user: User, persona_id: int) -> None:
    """Soft delete: historical messages keep a valid sender."""
    persona = get_owned(db, user.id, persona_id)
    persona.is_active = False
    db.commit()

    logger.info("Persona deleted (soft)", id=persona.id)


def initialize_defaults(db: Session, user: User) -> tuple[list[Persona], bool]:
    """Seed the default board for a first-time user.

    A user with at least one active persona is left untouched.

    Returns:
        (active personas, whether any were created)
    """
    existing = list_active(db, user.id)
    if existing:
        return existing, False

    for template in DEFAULT_PERSONAS[:DEFAULT_BOARD_SIZE]:
        db.add(
            Persona(
                owner_id=user.id,
                name=template["name"],
                personality=template["personality"].value,
                description=template["description"],
                avatar_url=template["avatar_url"],
                system_prompt=resolve_system_prompt(template["personality"]),
                is_active=True,
            )
        )
    db.commit()

    logger.info("Default personas created", owner_id=user.id, count=DEFAULT_BOARD_SIZE)
    return list_active(db, user.id), True
