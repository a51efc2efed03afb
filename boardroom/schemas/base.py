"""Shared schema bases: camelCase JSON, pagination and the error envelope."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from humps import camelize


class CamelModel(BaseModel):
    """
    snake_case attributes, camelCase on the wire.

    Usage:
        class MessageResponse(CamelModel):
            conversation_id: int   # JSON: conversationId
            sender_type: str       # JSON: senderType

    Request bodies accept either spelling; ORM rows validate directly.
    """

    model_config = ConfigDict(
        alias_generator=camelize,
        populate_by_name=True,
        from_attributes=True,
    )


T = TypeVar("T")


class PaginationMeta(CamelModel):
    page: int
    per_page: int
    total: int
    total_pages: int


class PaginatedResponse(CamelModel, Generic[T]):
    """One page of results: {"data": [...], "meta": {...}}."""

    data: list[T]
    meta: PaginationMeta


class ErrorDetail(CamelModel):
    code: str
    message: str
    details: dict[str, Any] = {}


class ErrorResponse(CamelModel):
    """Error envelope returned by every handler in middleware.error_handler."""

    error: ErrorDetail
