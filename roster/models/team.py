"""
Team model.

A Team groups members. The Team side of the Member/Team association is
the inverse side: Member.team_id is the only thing written to the
database, and deleting a Team leaves its members in place with no team.
"""

from typing import List, TYPE_CHECKING
from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roster.models.base import Base, BaseModel

if TYPE_CHECKING:
    from roster.models.member import Member


class Team(BaseModel, Base):
    """
    A named team.

    Attributes:
        id: Auto-incrementing primary key
        name: Team name (not unique)
        members: Inverse side of Member.team (never loaded implicitly)

    Example:
        team = Team(name="teamA")
        TeamRepository(db).save(team)
    """

    __tablename__ = "team"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True
    )

    # passive_deletes: the FK's ON DELETE SET NULL detaches members,
    # so the collection is never loaded just to delete a team
    members: Mapped[List["Member"]] = relationship(
        back_populates="team",
        lazy="raise_on_sql",
        passive_deletes=True
    )

    def __init__(self, name: str = None, **kwargs):
        """
        Initialize a Team with validation.

        Raises:
            ValueError: If name is empty
        """
        super().__init__(name=name, **kwargs)

        if not self.name or not self.name.strip():
            raise ValueError("Team name cannot be empty")

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"

    def __str__(self) -> str:
        return self.name
