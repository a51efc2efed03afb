"""Authentication endpoints.

Sign-in here is a development stand-in: any email is accepted and upserted.
"""

import structlog
from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from boardroom.config.database import get_db
from boardroom.config.settings import settings
from boardroom.models import User
from boardroom.schemas.users import LoginRequest, LoginResponse, UserResponse
from boardroom.services.rbac import get_current_user
from boardroom.services.subscriptions import can_share_media, persona_limit
from boardroom.services.token import create_user_token

logger = structlog.get_logger()
router = APIRouter()


def user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        subscription_tier=user.subscription_tier,
        is_admin=user.is_admin,
        persona_limit=persona_limit(user),
        can_share_media=can_share_media(user),
        created_at=user.created_at,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
) -> LoginResponse:
    """Upsert the user by email and issue a session cookie."""
    email = data.email.strip().lower()
    user = db.query(User).filter(User.email == email).first()

    if user is None:
        user = User(email=email, first_name=data.first_name, last_name=data.last_name)
        db.add(user)
        logger.info("User created", email=email)
    else:
        if data.first_name is not None:
            user.first_name = data.first_name
        if data.last_name is not None:
            user.last_name = data.last_name

    db.commit()
    db.refresh(user)

    token = create_user_token(user.id, user.email)
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        domain=settings.COOKIE_DOMAIN,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    logger.info("User signed in", user_id=user.id)
    return LoginResponse(
        user=user_response(user),
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)) -> UserResponse:
    """Current user profile, including tier limits."""
    return user_response(user)


@router.post("/logout", status_code=204)
async def logout(response: Response) -> Response:
    """Clear the session cookie."""
    response.delete_cookie(key=settings.COOKIE_NAME, domain=settings.COOKIE_DOMAIN)
    response.status_code = 204
    return response
