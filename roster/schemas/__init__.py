"""Pydantic projections (DTOs) for read-side queries."""

from roster.schemas.member import MemberDto, TeamDto

__all__ = [
    "MemberDto",
    "TeamDto",
]
