"""Access control dependencies for API endpoints."""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
import structlog

from boardroom.config.database import get_db
from boardroom.middleware.error_handler import ForbiddenError, UnauthorizedError
from boardroom.models import User

logger = structlog.get_logger()


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Load the calling user from the id placed on request state by AuthMiddleware.

    Usage:
        @router.get("/me")
        def get_me(user: User = Depends(get_current_user)):
            return user
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id is None:
        raise UnauthorizedError()

    try:
        user = db.get(User, int(user_id))
    except ValueError:
        user = None

    if user is None:
        raise UnauthorizedError("Unknown user")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """
    Dependency that requires an admin account.

    Usage:
        @router.put("/settings/{key}")
        def update(user: User = Depends(require_admin)):
            ...
    """
    if not user.is_admin:
        logger.warning("Admin check failed", user_id=user.id)
        raise ForbiddenError()
    return user
