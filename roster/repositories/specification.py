"""
Query specifications.

A QuerySpec is a statically declared, immutable description of a
query: a conjunction of conditions, an optional Sort, and the
relationships to load with the result. Repositories compile it into a
SQLAlchemy SELECT; nothing is parsed from method names at runtime.

Usage:
    spec = QuerySpec.of(eq("username", "member1"), gt("age", 10))
    repo.find_by(spec)

    spec = spec.order_by(Sort.by("age")).with_relations("team")
"""

from typing import Any, Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict
from sqlalchemy import Select, and_, false, true
from sqlalchemy.orm import joinedload, selectinload

from roster.core.constants import COLLECTION_OPERATORS, UNARY_OPERATORS, Operator
from roster.core.exceptions import InvalidQueryError
from roster.repositories.columns import resolve_column, resolve_relationship
from roster.repositories.paging import Sort


class Condition(BaseModel):
    """A single predicate: <field> <operator> <value>."""

    model_config = ConfigDict(frozen=True)

    field: str
    operator: Operator
    value: Any = None

    def to_clause(self, model):
        """Compile against model; raises InvalidQueryError on misuse."""
        column = resolve_column(model, self.field)
        op, value = self.operator, self.value

        if op in UNARY_OPERATORS:
            return column.is_(None) if op is Operator.IS_NULL else column.is_not(None)

        if op in COLLECTION_OPERATORS:
            if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
                raise InvalidQueryError(f"{op.value} on '{self.field}' needs a collection, got {value!r}")
            values = list(value)
            if not values:
                # x IN () matches nothing, x NOT IN () matches everything
                return false() if op is Operator.IN else true()
            return column.in_(values) if op is Operator.IN else column.not_in(values)

        if op is Operator.BETWEEN:
            if not isinstance(value, (tuple, list)) or len(value) != 2:
                raise InvalidQueryError(f"between on '{self.field}' needs (low, high), got {value!r}")
            return column.between(value[0], value[1])

        if value is None:
            if op is Operator.EQ:
                return column.is_(None)
            if op is Operator.NE:
                return column.is_not(None)
            raise InvalidQueryError(f"{op.value} on '{self.field}' needs a value")

        if op is Operator.EQ:
            return column == value
        if op is Operator.NE:
            return column != value
        if op is Operator.GT:
            return column > value
        if op is Operator.GTE:
            return column >= value
        if op is Operator.LT:
            return column < value
        if op is Operator.LTE:
            return column <= value
        if op is Operator.LIKE:
            return column.like(value)
        if op is Operator.STARTS_WITH:
            return column.startswith(value, autoescape=True)
        if op is Operator.ENDS_WITH:
            return column.endswith(value, autoescape=True)
        if op is Operator.CONTAINS:
            return column.contains(value, autoescape=True)

        raise InvalidQueryError(f"Unsupported operator: {op!r}")


# ========================================
# Condition helpers
# ========================================

def eq(field: str, value: Any) -> Condition:
    return Condition(field=field, operator=Operator.EQ, value=value)


def ne(field: str, value: Any) -> Condition:
    return Condition(field=field, operator=Operator.NE, value=value)


def gt(field: str, value: Any) -> Condition:
    return Condition(field=field, operator=Operator.GT, value=value)


def gte(field: str, value: Any) -> Condition:
    return Condition(field=field, operator=Operator.GTE, value=value)


def lt(field: str, value: Any) -> Condition:
    return Condition(field=field, operator=Operator.LT, value=value)


def lte(field: str, value: Any) -> Condition:
    return Condition(field=field, operator=Operator.LTE, value=value)


def in_(field: str, values: Iterable[Any]) -> Condition:
    return Condition(field=field, operator=Operator.IN, value=_freeze(values))


def not_in(field: str, values: Iterable[Any]) -> Condition:
    return Condition(field=field, operator=Operator.NOT_IN, value=_freeze(values))


def like(field: str, pattern: str) -> Condition:
    return Condition(field=field, operator=Operator.LIKE, value=pattern)


def starts_with(field: str, prefix: str) -> Condition:
    return Condition(field=field, operator=Operator.STARTS_WITH, value=prefix)


def ends_with(field: str, suffix: str) -> Condition:
    return Condition(field=field, operator=Operator.ENDS_WITH, value=suffix)


def contains(field: str, fragment: str) -> Condition:
    return Condition(field=field, operator=Operator.CONTAINS, value=fragment)


def between(field: str, low: Any, high: Any) -> Condition:
    return Condition(field=field, operator=Operator.BETWEEN, value=(low, high))


def is_null(field: str) -> Condition:
    return Condition(field=field, operator=Operator.IS_NULL)


def is_not_null(field: str) -> Condition:
    return Condition(field=field, operator=Operator.IS_NOT_NULL)


def _freeze(values: Iterable[Any]):
    # Strings are iterable too; leave them for to_clause to reject
    if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
        return values
    return tuple(values)


# ========================================
# Specification
# ========================================

class QuerySpec(BaseModel):
    """
    Conjunction of conditions plus sort and eager-load instructions.

    Every builder method returns a new QuerySpec.

    Attributes:
        conditions: Predicates ANDed together (empty matches everything)
        sort: Ordering, or None for storage order
        relations: Relationship names to load in the same query
    """

    model_config = ConfigDict(frozen=True)

    conditions: Tuple[Condition, ...] = ()
    sort: Optional[Sort] = None
    relations: Tuple[str, ...] = ()

    @classmethod
    def of(cls, *conditions: Condition) -> "QuerySpec":
        return cls(conditions=tuple(conditions))

    def where(self, *conditions: Condition) -> "QuerySpec":
        return self.model_copy(update={"conditions": self.conditions + tuple(conditions)})

    def order_by(self, sort: Optional[Sort]) -> "QuerySpec":
        return self.model_copy(update={"sort": sort})

    def with_relations(self, *names: str) -> "QuerySpec":
        merged = self.relations + tuple(n for n in names if n not in self.relations)
        return self.model_copy(update={"relations": merged})

    def and_(self, other: "QuerySpec") -> "QuerySpec":
        """Both specs' conditions; other's sort wins when it has one."""
        return QuerySpec(
            conditions=self.conditions + other.conditions,
            sort=other.sort if other.sort is not None else self.sort,
            relations=self.relations + tuple(n for n in other.relations if n not in self.relations),
        )

    # ----------------------------------------
    # Compilation
    # ----------------------------------------

    def to_where(self, model):
        """Single WHERE clause for model, or None when unconstrained."""
        clauses = [condition.to_clause(model) for condition in self.conditions]
        if not clauses:
            return None
        return clauses[0] if len(clauses) == 1 else and_(*clauses)

    def loader_options(self, model) -> list:
        return load_options(model, self.relations)

    def apply_filter(self, stmt: Select, model) -> Select:
        where = self.to_where(model)
        return stmt if where is None else stmt.where(where)


def load_options(model, relations: Iterable[str]) -> list:
    """
    Eager-load options for the named relationships.

    Many-to-one relations are joined into the same SELECT; collections
    use a single follow-up SELECT ... IN so row counts stay correct
    under LIMIT.
    """
    options = []
    for name in relations:
        prop = resolve_relationship(model, name)
        attr = getattr(model, name)
        options.append(selectinload(attr) if prop.uselist else joinedload(attr))
    return options
