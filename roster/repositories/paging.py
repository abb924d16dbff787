"""
Paging and sorting.

A PageRequest (zero-based page index, page size, Sort) is turned into
two statements: a COUNT over the filtered query, which ignores the
sort, and the ordered, OFFSET/LIMIT-bounded content query.

Usage:
    request = PageRequest.of(0, 3, Sort.by("username", direction=Direction.DESC))
    page = paginate(db, select(Member).where(Member.age == 10), request, Member)
    page.total_elements, page.number_of_elements
"""

import math
from typing import Any, Callable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import Select, func, inspect, select
from sqlalchemy.orm import Session

from roster.config import settings
from roster.core.constants import Direction
from roster.core.exceptions import translate_errors
from roster.repositories.columns import resolve_column


# ========================================
# Sorting
# ========================================

class Order(BaseModel):
    """One sort key: a column name and a direction."""

    model_config = ConfigDict(frozen=True)

    field: str
    direction: Direction = Direction.ASC

    @classmethod
    def asc(cls, field: str) -> "Order":
        return cls(field=field, direction=Direction.ASC)

    @classmethod
    def desc(cls, field: str) -> "Order":
        return cls(field=field, direction=Direction.DESC)

    def to_clause(self, model):
        column = resolve_column(model, self.field)
        return column.asc() if self.direction.is_ascending else column.desc()


class Sort(BaseModel):
    """
    An ordered list of sort keys, applied left to right.

    Example:
        Sort.by("username", direction=Direction.DESC)
        Sort.by("age").and_(Sort.by("username", direction=Direction.DESC))
    """

    model_config = ConfigDict(frozen=True)

    orders: Tuple[Order, ...] = ()

    @classmethod
    def by(cls, *fields: str, direction: Direction = Direction.ASC) -> "Sort":
        return cls(orders=tuple(Order(field=f, direction=direction) for f in fields))

    @classmethod
    def of(cls, *orders: Order) -> "Sort":
        return cls(orders=tuple(orders))

    @classmethod
    def unsorted(cls) -> "Sort":
        return cls()

    def and_(self, other: "Sort") -> "Sort":
        return Sort(orders=self.orders + other.orders)

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def to_order_by(self, model) -> list:
        """ORDER BY clauses for model; unknown fields raise InvalidQueryError."""
        return [order.to_clause(model) for order in self.orders]


# ========================================
# Page Request
# ========================================

class PageRequest(BaseModel):
    """
    Which slice of a result to fetch.

    Attributes:
        page: Zero-based page index
        size: Maximum items per page (1..settings.max_page_size)
        sort: Ordering applied before slicing
    """

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=0, ge=0)
    size: int = Field(default_factory=lambda: settings.default_page_size, gt=0)
    sort: Sort = Field(default_factory=Sort.unsorted)

    @field_validator("size")
    @classmethod
    def validate_size(cls, v: int) -> int:
        if v > settings.max_page_size:
            raise ValueError(f"Page size {v} exceeds max_page_size ({settings.max_page_size})")
        return v

    @classmethod
    def of(cls, page: int, size: Optional[int] = None, sort: Optional[Sort] = None) -> "PageRequest":
        data = {"page": page, "sort": sort or Sort.unsorted()}
        if size is not None:
            data["size"] = size
        return cls(**data)

    @property
    def offset(self) -> int:
        return self.page * self.size

    def next(self) -> "PageRequest":
        return self.model_copy(update={"page": self.page + 1})

    def previous_or_first(self) -> "PageRequest":
        return self.model_copy(update={"page": max(self.page - 1, 0)})

    def first(self) -> "PageRequest":
        return self.model_copy(update={"page": 0})


# ========================================
# Page
# ========================================

class Page(BaseModel):
    """
    One page of results plus totals for the whole query.

    Attributes:
        content: Items on this page (at most size)
        number: Zero-based page index
        size: Requested page size
        total_elements: Matching rows across all pages
        sort: Sort the content was ordered by
    """

    content: List[Any]
    number: int
    size: int
    total_elements: int
    sort: Sort = Field(default_factory=Sort.unsorted)

    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_elements / self.size) if self.total_elements else 0

    @property
    def has_content(self) -> bool:
        return bool(self.content)

    @property
    def is_first(self) -> bool:
        return self.number == 0

    @property
    def is_last(self) -> bool:
        return self.number + 1 >= self.total_pages

    @property
    def has_next(self) -> bool:
        return not self.is_last

    @property
    def has_previous(self) -> bool:
        return self.number > 0

    def map(self, converter: Callable[[Any], Any]) -> "Page":
        """Same page metadata, content passed through converter."""
        return self.model_copy(update={"content": [converter(item) for item in self.content]})


def paginate(
    db: Session,
    stmt: Select,
    page_request: PageRequest,
    model,
    options: Sequence = (),
) -> Page:
    """
    Execute an entity query one page at a time.

    Args:
        db: Database session
        stmt: Filtered SELECT of model, without ordering or loader options
        page_request: Page index, size and sort
        model: Mapped class selected by stmt (sort fields are resolved on it)
        options: Loader options (e.g. joinedload) for the content query

    Returns:
        Page whose total_elements counts every row matching stmt
    """
    # Resolve the sort first so a bad field fails before any I/O
    order_by = page_request.sort.to_order_by(model)
    # Primary key tiebreak keeps pages disjoint when sort keys collide
    order_by.extend(column.asc() for column in inspect(model).primary_key)

    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    with translate_errors(f"count {model.__name__} page"):
        total = db.execute(count_stmt).scalar() or 0

    content: list = []
    if total > page_request.offset:
        page_stmt = (
            stmt.order_by(None)
            .order_by(*order_by)
            .offset(page_request.offset)
            .limit(page_request.size)
        )
        if options:
            page_stmt = page_stmt.options(*options)
        with translate_errors(f"load {model.__name__} page"):
            content = list(db.execute(page_stmt).scalars().all())

    return Page(
        content=content,
        number=page_request.page,
        size=page_request.size,
        total_elements=total,
        sort=page_request.sort,
    )
