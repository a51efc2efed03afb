"""Admin endpoints: runtime settings and dashboard analytics."""

from datetime import datetime, time
from typing import List

import structlog
from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from boardroom.config.database import get_db
from boardroom.config.settings import settings
from boardroom.models import DEFAULT_SETTINGS, Message, Setting, User
from boardroom.models.base import utcnow
from boardroom.schemas.base import ErrorResponse
from boardroom.schemas.settings import AnalyticsResponse, SettingResponse, SettingUpdate
from boardroom.services.rbac import require_admin

logger = structlog.get_logger()
router = APIRouter()


def seed_default_settings(db: Session) -> None:
    """Insert any default setting that is not stored yet."""
    existing = {key for (key,) in db.query(Setting.key).all()}
    missing = [
        Setting(key=key, value=value, description=description)
        for key, (value, description) in DEFAULT_SETTINGS.items()
        if key not in existing
    ]
    if missing:
        db.add_all(missing)
        db.commit()
        logger.info("Settings seeded", keys=[s.key for s in missing])


@router.get("/settings", response_model=List[SettingResponse], responses={403: {"model": ErrorResponse}})
async def list_settings(
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    """All runtime settings, defaults included."""
    seed_default_settings(db)
    settings_rows = db.query(Setting).order_by(Setting.key).all()
    return [SettingResponse.model_validate(s) for s in settings_rows]


@router.put("/settings/{key}", response_model=SettingResponse, responses={403: {"model": ErrorResponse}})
async def update_setting(
    key: str,
    data: SettingUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    """Create or replace a setting value."""
    setting = db.query(Setting).filter(Setting.key == key).first()
    if setting:
        setting.value = data.value
        if data.description is not None:
            setting.description = data.description
    else:
        description = data.description
        if description is None:
            description = DEFAULT_SETTINGS.get(key, ("", None))[1]
        setting = Setting(key=key, value=data.value, description=description)
        db.add(setting)

    db.commit()
    db.refresh(setting)

    logger.info("Setting updated", key=key, admin_id=user.id)
    return SettingResponse.model_validate(setting)


@router.get("/analytics", response_model=AnalyticsResponse, responses={403: {"model": ErrorResponse}})
async def get_analytics(
    db: Session = Depends(get_db),
    user: User = Depends(require_admin),
):
    """
    Dashboard counters.

    todayMessages counts every message (user and persona) since midnight UTC.
    conversionRate is the percentage of users on a paid tier.
    """
    start_of_day = datetime.combine(utcnow().date(), time.min)

    total_users = db.query(func.count(User.id)).scalar() or 0
    today_messages = (
        db.query(func.count(Message.id))
        .filter(Message.created_at >= start_of_day)
        .scalar()
    ) or 0
    premium_users = (
        db.query(func.count(User.id))
        .filter(func.lower(User.subscription_tier).in_(settings.PREMIUM_TIERS))
        .scalar()
    ) or 0

    conversion_rate = round(premium_users / total_users * 100, 1) if total_users else 0.0

    return AnalyticsResponse(
        total_users=total_users,
        today_messages=today_messages,
        premium_users=premium_users,
        conversion_rate=conversion_rate,
    )
