"""
Data access layer (Repository pattern).

Repositories handle all database queries,
isolating callers from SQL.
"""

from roster.repositories.auditing import AuditHook, SaveHook
from roster.repositories.base import BaseRepository
from roster.repositories.member_repository import MemberRepository
from roster.repositories.paging import Order, Page, PageRequest, Sort, paginate
from roster.repositories.specification import (
    Condition,
    QuerySpec,
    between,
    contains,
    ends_with,
    eq,
    gt,
    gte,
    in_,
    is_not_null,
    is_null,
    like,
    lt,
    lte,
    ne,
    not_in,
    starts_with,
)
from roster.repositories.team_repository import TeamRepository

__all__ = [
    "AuditHook",
    "SaveHook",
    "BaseRepository",
    "MemberRepository",
    "TeamRepository",
    "Order",
    "Page",
    "PageRequest",
    "Sort",
    "paginate",
    "Condition",
    "QuerySpec",
    "between",
    "contains",
    "ends_with",
    "eq",
    "gt",
    "gte",
    "in_",
    "is_not_null",
    "is_null",
    "like",
    "lt",
    "lte",
    "ne",
    "not_in",
    "starts_with",
]
