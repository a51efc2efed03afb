"""Pydantic schemas for API request/response validation.

All schemas use CamelCase for JSON field names (via alias_generator).
"""

from .base import CamelModel, PaginatedResponse, PaginationMeta, ErrorResponse

# Re-export all schemas
from .users import LoginRequest, LoginResponse, UserResponse
from .personas import (
    PersonaCreate,
    PersonaUpdate,
    PersonaResponse,
    PersonaSummary,
    InitializePersonasResponse,
)
from .conversations import ConversationCreate, ConversationResponse, MessageResponse
from .chat import (
    Attachment,
    ChatSendRequest,
    ChatSendResponse,
    ChatMessageEvent,
    PersonaReplyResponse,
    PersonaFailureResponse,
)
from .uploads import FilePayload, UploadRequest, UploadResponse, UploadMetadata
from .settings import SettingResponse, SettingUpdate, AnalyticsResponse

__all__ = [
    # Base
    "CamelModel",
    "PaginatedResponse",
    "PaginationMeta",
    "ErrorResponse",
    # Users
    "LoginRequest",
    "LoginResponse",
    "UserResponse",
    # Personas
    "PersonaCreate",
    "PersonaUpdate",
    "PersonaResponse",
    "PersonaSummary",
    "InitializePersonasResponse",
    # Conversations
    "ConversationCreate",
    "ConversationResponse",
    "MessageResponse",
    # Chat
    "Attachment",
    "ChatSendRequest",
    "ChatSendResponse",
    "ChatMessageEvent",
    "PersonaReplyResponse",
    "PersonaFailureResponse",
    # Uploads
    "FilePayload",
    "UploadRequest",
    "UploadResponse",
    "UploadMetadata",
    # Settings
    "SettingResponse",
    "SettingUpdate",
    "AnalyticsResponse",
]
