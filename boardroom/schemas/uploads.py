"""Pydantic schemas for media uploads."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from .base import CamelModel


class FilePayload(CamelModel):
    """Base64-encoded file sent by the client."""

    name: str = Field(min_length=1, max_length=255)
    type: str
    size: int = Field(ge=0)
    data: str


class UploadRequest(CamelModel):
    """Body of POST /uploads."""

    file: FilePayload
    message_type: Literal["image", "audio"]


class UploadMetadata(CamelModel):
    """Stored alongside the message that references the upload."""

    original_name: str
    mime_type: str
    size: int
    uploaded_at: datetime
    uploaded_by: int


class UploadResponse(CamelModel):
    """Result of a successful upload."""

    success: bool = True
    file_url: str
    metadata: UploadMetadata
    message_type: str
