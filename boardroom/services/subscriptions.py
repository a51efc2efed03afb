"""Subscription tier limits.

Billing lives with the payment providers; this module only answers what a
user's current tier allows.
"""

import structlog
from sqlalchemy.orm import Session

from boardroom.config.settings import settings
from boardroom.middleware.error_handler import LimitExceededError
from boardroom.models import Persona, User

logger = structlog.get_logger()


def is_premium(user: User) -> bool:
    return (user.subscription_tier or "free").lower() in settings.PREMIUM_TIERS


def persona_limit(user: User) -> int:
    """Maximum number of active board members for the user's tier."""
    if is_premium(user):
        return settings.PREMIUM_PERSONA_LIMIT
    return settings.FREE_PERSONA_LIMIT


def can_share_media(user: User) -> bool:
    """Image and audio messages are a paid-tier feature."""
    return is_premium(user)


def active_persona_count(db: Session, user_id: int) -> int:
    return (
        db.query(Persona)
        .filter(Persona.owner_id == user_id, Persona.is_active == True)  # noqa: E712
        .count()
    )


def ensure_persona_capacity(db: Session, user: User) -> None:
    """Raise LimitExceededError when the user cannot add another persona."""
    limit = persona_limit(user)
    count = active_persona_count(db, user.id)
    if count >= limit:
        logger.info(
            "Persona limit reached",
            user_id=user.id,
            tier=user.subscription_tier,
            limit=limit,
        )
        raise LimitExceededError(limit)
