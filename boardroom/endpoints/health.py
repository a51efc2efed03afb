"""Health check endpoints for monitoring."""

from datetime import datetime, timezone

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.orm import Session

from boardroom.config.settings import settings
from boardroom.config.database import get_db

logger = structlog.get_logger()
router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    database: str
    completion: str


def check_database(db: Session) -> tuple[str, str | None]:
    """Check database connectivity."""
    try:
        result = db.execute(text("SELECT 1"))
        result.fetchone()
        return "connected", None
    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return "disconnected", str(e)


def check_completion() -> str:
    """Whether a Claude API key is configured (no network call)."""
    return "configured" if settings.ANTHROPIC_API_KEY else "not_configured"


@router.get("", response_model=HealthResponse)
@router.get("/", response_model=HealthResponse)
async def health_check(
    db: Session = Depends(get_db),
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns overall status and component health.
    """
    db_status, _ = check_database(db)

    return HealthResponse(
        status="healthy" if db_status == "connected" else "unhealthy",
        version=settings.APP_VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        database=db_status,
        completion=check_completion(),
    )
