"""Media upload endpoint (paid tiers only)."""

import structlog
from fastapi import APIRouter, Depends

from boardroom.models import User
from boardroom.schemas.base import ErrorResponse
from boardroom.schemas.uploads import UploadRequest, UploadResponse
from boardroom.services.rbac import get_current_user
from boardroom.services.uploads import store_upload

logger = structlog.get_logger()
router = APIRouter()


@router.post(
    "",
    response_model=UploadResponse,
    responses={403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def upload_media(
    data: UploadRequest,
    user: User = Depends(get_current_user),
) -> UploadResponse:
    """Store an image or audio file for use as a chat attachment.

    The returned fileUrl goes into the `attachment.url` of the chat message.
    """
    return store_upload(user, data)
