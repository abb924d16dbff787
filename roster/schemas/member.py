"""
Read-side projections.

DTOs are plain pydantic models: they are built from selected columns
or from already-loaded entities and are never added to a session.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from roster.models import Member, Team


class TeamDto(BaseModel):
    """Projection of a Team."""

    model_config = ConfigDict(frozen=True)

    id: Optional[int] = None
    name: str

    @classmethod
    def from_entity(cls, team: Team) -> "TeamDto":
        return cls(id=team.id, name=team.name)


class MemberDto(BaseModel):
    """
    Projection of a Member with its team.

    Example:
        dto = MemberDto(username="member1", age=20, team=TeamDto(id=1, name="teamA"))
        dto.team.name  # "teamA"
    """

    model_config = ConfigDict(frozen=True)

    username: str
    age: int = Field(default=0, ge=0)
    team: Optional[TeamDto] = None

    @classmethod
    def from_entity(cls, member: Member) -> "MemberDto":
        """
        Map a loaded Member.

        member.team must already be loaded (or None); this never
        triggers a lazy load.
        """
        team = member.team
        return cls(
            username=member.username,
            age=member.age,
            team=TeamDto.from_entity(team) if team is not None else None,
        )

    @classmethod
    def from_row(cls, username: str, age: int, team_id: Optional[int], team_name: Optional[str]) -> "MemberDto":
        """Build from a (username, age, team.id, team.name) result row."""
        team = TeamDto(id=team_id, name=team_name) if team_id is not None else None
        return cls(username=username, age=age, team=team)
