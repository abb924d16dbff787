"""
Roster: Member/Team persistence on SQLAlchemy.

Repositories, query specifications, paging and audit hooks for a
small two-entity schema.
"""

__version__ = "0.1.0"
