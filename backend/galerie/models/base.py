"""
Base models and mixins for SQLAlchemy ORM.

Tables are created by the SQL migrations in ``backend/migrations``; the ORM
classes only map them. Timestamps are ISO 8601 UTC strings (TEXT columns).
"""

from datetime import datetime, timezone
from typing import Any
import json
import uuid

from sqlalchemy import Column, String
from sqlalchemy.orm import declarative_base


# SQLAlchemy declarative base for all ORM models
Base = declarative_base()


def utc_now_iso() -> str:
    """
    Current UTC timestamp in ISO format.

    Returns:
        ISO format timestamp string (e.g., "2026-01-15T10:30:45.123456+00:00")
    """
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    """
    Mixin that adds created_at and updated_at timestamp columns.

    Values are set application-side, like every other default in this schema.
    """

    created_at = Column(
        String,
        nullable=True,
        default=utc_now_iso,
        doc="UTC timestamp when record was created"
    )

    updated_at = Column(
        String,
        nullable=True,
        default=utc_now_iso,
        onupdate=utc_now_iso,
        doc="UTC timestamp when record was last updated"
    )


class TagsMixin:
    """Helpers for a ``tags`` TEXT column holding a JSON array."""

    def get_tags(self) -> list[str] | None:
        if not self.tags:
            return None
        return json.loads(self.tags)

    def set_tags(self, tags: list[str] | None) -> None:
        self.tags = json.dumps(tags) if tags is not None else None


class ModelMixin:
    """
    Mixin providing common model utilities.
    """

    def to_dict(self) -> dict[str, Any]:
        """
        Convert model instance to dictionary.

        Only includes columns, not relationships.
        """
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        attrs = ", ".join(
            f"{key}={value!r}"
            for key, value in self.to_dict().items()
            if key in ["id", "name", "title", "github_login"]
        )
        return f"{self.__class__.__name__}({attrs})"
