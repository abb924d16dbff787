"""
Library-wide constants.

Centralize magic strings and enumerations here so query building,
paging and configuration all agree on the valid values.
"""

from enum import Enum


# ========================================
# Sort Direction
# ========================================

class Direction(str, Enum):
    """
    Sort direction for an ordered field.

    Inherits from str so values read from configuration or query
    strings ("asc", "desc") compare equal to the members.

    Usage:
        Direction.DESC == "desc"  # True
    """

    ASC = "asc"
    DESC = "desc"

    @property
    def is_ascending(self) -> bool:
        return self is Direction.ASC

    @classmethod
    def from_string(cls, value: str) -> "Direction":
        """Parse a direction case-insensitively."""
        try:
            return cls(value.lower())
        except ValueError:
            raise ValueError(f"Invalid sort direction: {value!r} (expected 'asc' or 'desc')")


# ========================================
# Query Operators
# ========================================

class Operator(str, Enum):
    """Comparison operators available to a query condition."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NOT_IN = "not_in"
    LIKE = "like"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    CONTAINS = "contains"
    BETWEEN = "between"
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


# Operators that take no value
UNARY_OPERATORS = frozenset({Operator.IS_NULL, Operator.IS_NOT_NULL})

# Operators whose value is a collection
COLLECTION_OPERATORS = frozenset({Operator.IN, Operator.NOT_IN})


# ========================================
# Delete Policy
# ========================================

class DeletePolicy(str, Enum):
    """
    What delete does when the row is already gone.

    ERROR raises EntityNotFoundError, IGNORE makes delete idempotent.
    """

    ERROR = "error"
    IGNORE = "ignore"
