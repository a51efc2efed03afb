"""Base model with common fields and utilities."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declared_attr


def utcnow() -> datetime:
    """Naive UTC timestamp with microsecond precision.

    Generated application-side so message ordering does not depend on the
    resolution of the database clock.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime,
            default=utcnow,
            nullable=False,
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime,
            onupdate=utcnow,
            nullable=True,
        )
