"""
Database models package.

Contains all SQLAlchemy ORM models.
"""

from roster.models.base import Base, BaseModel, AuditedModel, AuditMixin
from roster.models.team import Team
from roster.models.member import Member

__all__ = [
    "Base",
    "BaseModel",
    "AuditedModel",
    "AuditMixin",
    "Team",
    "Member",
]
