"""
Base Model
==========

Provides common functionality for all database models.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import DateTime, String
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class AuditMixin:
    """
    Mixin that adds creation and modification audit columns.

    The repository's AuditHook fills these in on save. The server
    default on created_at only covers rows inserted some other way.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    modified_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    modified_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class IdentityMixin:
    """
    Identity-based equality.

    Two instances are equal when they are the same type and share a
    primary key. Before the first save (id is None) only the object
    itself is equal to it. The hash changes once an id is assigned, so
    do not keep unsaved entities in sets across a save.
    """

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return NotImplemented
        return self.id is not None and self.id == other.id

    def __hash__(self) -> int:
        if self.id is None:
            return object.__hash__(self)
        return hash((type(self).__name__, self.id))


class SerializationMixin:
    """Mixin that adds to_dict() serialization method."""

    def to_dict(self, exclude: set = None) -> Dict[str, Any]:
        """Convert model instance to dictionary."""
        exclude = exclude or set()
        result = {}
        for column in self.__table__.columns:
            if column.name in exclude:
                continue
            value = getattr(self, column.name)
            if isinstance(value, datetime):
                result[column.name] = value.isoformat()
            else:
                result[column.name] = value
        return result


class BaseModel(IdentityMixin, SerializationMixin):
    """Base model combining identity equality and serialization."""
    pass


class AuditedModel(AuditMixin, BaseModel):
    """Base model for entities that carry audit columns."""
    pass
