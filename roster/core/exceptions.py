"""
Repository error taxonomy.

Lookups never raise for a missing row (they return None). Everything
else that goes wrong in the store is wrapped in a RepositoryError
subclass so callers do not depend on SQLAlchemy exception types.
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError

logger = logging.getLogger(__name__)


class RepositoryError(RuntimeError):
    """Raised when repository operations fail."""


class EntityNotFoundError(RepositoryError):
    """Raised when deleting or saving an entity whose row no longer exists."""

    def __init__(self, model_name: str, entity_id=None):
        self.model_name = model_name
        self.entity_id = entity_id
        super().__init__(f"{model_name} not found: id={entity_id!r}")


class ConstraintViolationError(RepositoryError):
    """Raised when a write violates a database constraint."""


class ConnectionFailureError(RepositoryError):
    """Raised when the database cannot be reached."""


class InvalidQueryError(RepositoryError, ValueError):
    """Raised for unknown fields, relations or malformed condition values."""


class NonUniqueResultError(RepositoryError):
    """Raised when a single-result query matches more than one row."""

    def __init__(self, model_name: str, count: int):
        self.model_name = model_name
        self.count = count
        super().__init__(f"Expected at most one {model_name}, found {count}")


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """
    Wrap SQLAlchemy errors raised inside the block.

    The session is not rolled back here; the caller owns the transaction.

    Usage:
        with translate_errors("save Member"):
            db.flush()
    """
    try:
        yield
    except IntegrityError as exc:
        logger.warning("Constraint violation during %s: %s", operation, exc.orig)
        raise ConstraintViolationError(f"{operation} failed: {exc.orig}") from exc
    except (OperationalError, InterfaceError) as exc:
        logger.warning("Database unavailable during %s: %s", operation, exc.orig)
        raise ConnectionFailureError(f"{operation} failed: {exc.orig}") from exc
