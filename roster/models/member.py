"""
Member model.

A Member belongs to at most one Team. The association is owned by the
member (member.team_id) and is never loaded behind the caller's back:
reading member.team when the team is not already in the session raises
instead of issuing a query. Ask the repository for the relation
explicitly (with_relations=("team",) or find_member_fetch_join()).
"""

from typing import Optional
from sqlalchemy import ForeignKey, Index, Integer, String, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.orm.attributes import set_committed_value

from roster.models.base import AuditedModel, Base
from roster.models.team import Team


class Member(AuditedModel, Base):
    """
    A team member.

    Attributes:
        id: Auto-incrementing primary key (assigned on first save)
        username: Member name (not unique)
        age: Age in years, defaults to 0
        team_id: FK to team.id, NULL when the member has no team
        team: The member's Team (many-to-one, optional)
        created_at / created_by: Set by AuditHook on insert (from AuditMixin)
        modified_at / modified_by: Set by AuditHook on update (from AuditMixin)

    Example:
        team = Team(name="teamA")
        member = Member("member1", 20, team)
        repo.save(member)
        member.id  # assigned
    """

    __tablename__ = "member"

    # ========================================
    # Primary Key
    # ========================================

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    # ========================================
    # Attributes
    # ========================================

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True
    )

    age: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0
    )

    # ========================================
    # Association
    # ========================================

    team_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("team.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    team: Mapped[Optional[Team]] = relationship(
        back_populates="members",
        lazy="raise_on_sql"
    )

    __table_args__ = (
        Index("ix_member_username_age", "username", "age"),
    )

    # ========================================
    # Construction
    # ========================================

    def __init__(self, username: str = None, age: int = 0, team: Optional[Team] = None, **kwargs):
        """
        Initialize a Member with validation.

        Raises:
            ValueError: If username is empty or age is negative
        """
        super().__init__(username=username, age=age, **kwargs)

        if not self.username or not self.username.strip():
            raise ValueError("Member username cannot be empty")
        if self.age is None or self.age < 0:
            raise ValueError(f"Member age must be >= 0, got {self.age}")

        if team is not None:
            self.change_team(team)

    def change_team(self, team: Optional[Team]) -> None:
        """
        Move this member to another team (or to none).

        Assigning the relationship keeps team.members in sync through
        back_populates. When the team is persisted and its members
        collection was never loaded, only the owning side is written:
        the collection stays unloaded and is read fresh when asked for.
        """
        if team is not None:
            team_state = inspect(team)
            if team_state.has_identity and "members" in team_state.unloaded:
                self.team_id = team.id
                set_committed_value(self, "team", team)
                return
        self.team = team

    # ========================================
    # String Representation
    # ========================================

    def __repr__(self) -> str:
        return (
            f"<Member(id={self.id}, username='{self.username}', "
            f"age={self.age}, team_id={self.team_id})>"
        )

    def __str__(self) -> str:
        return f"{self.username} ({self.age})"
