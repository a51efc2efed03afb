"""Media upload validation and local file storage."""

import base64
import binascii
import uuid
from datetime import datetime, timezone
from pathlib import Path

import structlog

from boardroom.config.settings import settings
from boardroom.middleware.error_handler import UpgradeRequiredError, ValidationAPIError
from boardroom.models import User
from boardroom.schemas.uploads import UploadMetadata, UploadRequest, UploadResponse
from boardroom.services.subscriptions import can_share_media

logger = structlog.get_logger()

ALLOWED_TYPES = {
    "image": ("image/jpeg", "image/png", "image/gif", "image/webp"),
    "audio": ("audio/mpeg", "audio/wav", "audio/ogg", "audio/mp4"),
}


def validate_upload(user: User, request: UploadRequest) -> bytes:
    """Check tier, declared size, MIME type and payload; return decoded bytes."""
    if not can_share_media(user):
        raise UpgradeRequiredError()

    file = request.file
    max_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
    if file.size > settings.MAX_UPLOAD_BYTES:
        raise ValidationAPIError(f"File too large. Maximum size is {max_mb}MB.", field="file.size")

    allowed = ALLOWED_TYPES[request.message_type]
    if file.type not in allowed:
        raise ValidationAPIError(
            f"Invalid file type. Allowed types: {', '.join(allowed)}",
            field="file.type",
        )

    data = file.data
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]
    try:
        content = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationAPIError("File data is not valid base64", field="file.data")

    if len(content) > settings.MAX_UPLOAD_BYTES:
        raise ValidationAPIError(f"File too large. Maximum size is {max_mb}MB.", field="file.data")
    return content


def store_upload(user: User, request: UploadRequest, upload_dir: Path | None = None) -> UploadResponse:
    """Validate and write the file under UPLOAD_DIR/<kind>/<uuid>.<ext>."""
    content = validate_upload(user, request)

    base_dir = Path(upload_dir or settings.UPLOAD_DIR)
    target_dir = base_dir / request.message_type
    target_dir.mkdir(parents=True, exist_ok=True)

    extension = Path(request.file.name).suffix.lower()
    filename = f"{uuid.uuid4()}{extension}"
    (target_dir / filename).write_bytes(content)

    file_url = f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{request.message_type}/{filename}"
    logger.info(
        "Media uploaded",
        user_id=user.id,
        message_type=request.message_type,
        size=len(content),
        file_url=file_url,
    )

    return UploadResponse(
        file_url=file_url,
        metadata=UploadMetadata(
            original_name=request.file.name,
            mime_type=request.file.type,
            size=len(content),
            uploaded_at=datetime.now(timezone.utc),
            uploaded_by=user.id,
        ),
        message_type=request.message_type,
    )
