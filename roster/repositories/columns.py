"""Attribute lookups shared by query specifications and sorting."""

from sqlalchemy import inspect
from sqlalchemy.orm import InstrumentedAttribute, RelationshipProperty

from roster.core.exceptions import InvalidQueryError


def resolve_column(model, field: str) -> InstrumentedAttribute:
    """Return model.<field> if it is a mapped column, else raise InvalidQueryError."""
    mapper = inspect(model)
    if field not in mapper.column_attrs:
        raise InvalidQueryError(f"{model.__name__} has no column '{field}'")
    return getattr(model, field)


def resolve_relationship(model, name: str) -> RelationshipProperty:
    """Return the relationship property called name, else raise InvalidQueryError."""
    mapper = inspect(model)
    if name not in mapper.relationships:
        raise InvalidQueryError(f"{model.__name__} has no relationship '{name}'")
    return mapper.relationships[name]
