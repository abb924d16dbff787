"""
Member repository.

Every query here is declared up front, either as a QuerySpec built
from condition helpers or as a SQLAlchemy statement bound at class
definition time.
"""

from typing import Collection, List, Optional

from sqlalchemy import bindparam, select, text, update
from sqlalchemy.orm import Session, contains_eager

from roster.core.exceptions import translate_errors
from roster.models import Member, Team
from roster.repositories.base import BaseRepository
from roster.repositories.paging import Page, PageRequest
from roster.repositories.specification import QuerySpec, eq, gt, in_
from roster.schemas import MemberDto


class MemberRepository(BaseRepository[Member]):
    """
    Queries over members.

    Example:
        with get_db_context() as db:
            repo = MemberRepository(db)
            repo.save(Member("member1", 10))
            repo.find_by_username_and_age_greater_than("member1", 5)
    """

    # Named query: username and age both equal
    FIND_MEMBER = select(Member).where(
        Member.username == bindparam("username"),
        Member.age == bindparam("age"),
    )

    # Projection straight from columns; teamless members get team=None
    FIND_MEMBER_DTO = (
        select(Member.username, Member.age, Team.id, Team.name)
        .outerjoin(Member.team)
        .order_by(Member.id)
    )

    # One statement for members and their teams
    FIND_MEMBER_FETCH_JOIN = (
        select(Member)
        .outerjoin(Member.team)
        .options(contains_eager(Member.team))
        .order_by(Member.id)
    )

    FIND_MEMBER_CUSTOM_SQL = text(
        "SELECT id, username, age, team_id, created_at, created_by, modified_at, modified_by "
        "FROM member ORDER BY id"
    ).columns(
        Member.id, Member.username, Member.age, Member.team_id,
        Member.created_at, Member.created_by, Member.modified_at, Member.modified_by,
    )

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, Member, **kwargs)

    # ========================================
    # Conditions
    # ========================================

    def find_by_username(self, username: str) -> List[Member]:
        return self.find_by(QuerySpec.of(eq("username", username)))

    def find_one_by_username(self, username: str) -> Optional[Member]:
        """
        The member called username, or None.

        Raises:
            NonUniqueResultError: Several members share the name
        """
        return self.find_one_by(QuerySpec.of(eq("username", username)))

    def find_by_username_and_age_greater_than(self, username: str, age: int) -> List[Member]:
        """Members named username who are strictly older than age."""
        return self.find_by(QuerySpec.of(eq("username", username), gt("age", age)))

    def find_by_names(self, names: Collection[str]) -> List[Member]:
        """Members whose username is in names, in storage order."""
        if not names:
            return []
        return self.find_by(QuerySpec.of(in_("username", names)))

    def find_by_age(self, age: int, page_request: PageRequest) -> Page:
        """
        One page of members with exactly this age.

        Example:
            request = PageRequest.of(0, 3, Sort.by("username", direction=Direction.DESC))
            page = repo.find_by_age(10, request)
            page.map(MemberDto.from_entity)
        """
        return self.find_page(QuerySpec.of(eq("age", age)), page_request)

    # ========================================
    # Declared statements
    # ========================================

    def find_member(self, username: str, age: int) -> List[Member]:
        with translate_errors("find_member"):
            result = self.db.execute(self.FIND_MEMBER, {"username": username, "age": age})
            return list(result.scalars().all())

    def find_usernames(self) -> List[str]:
        with translate_errors("find_usernames"):
            return list(self.db.execute(select(Member.username).order_by(Member.id)).scalars().all())

    def find_member_dto(self) -> List[MemberDto]:
        """Every member as a MemberDto, without loading Member entities."""
        with translate_errors("find_member_dto"):
            rows = self.db.execute(self.FIND_MEMBER_DTO).all()
        return [MemberDto.from_row(*row) for row in rows]

    def find_member_fetch_join(self) -> List[Member]:
        """Every member with member.team already loaded."""
        with translate_errors("find_member_fetch_join"):
            return list(self.db.execute(self.FIND_MEMBER_FETCH_JOIN).scalars().all())

    def find_member_custom(self) -> List[Member]:
        """Every member, loaded from hand-written SQL."""
        stmt = select(Member).from_statement(self.FIND_MEMBER_CUSTOM_SQL)
        with translate_errors("find_member_custom"):
            return list(self.db.execute(stmt).scalars().all())

    def bulk_age_plus(self, age: int) -> int:
        """
        Add one to the age of every member aged age or older.

        Runs a single UPDATE. Members already in the session have their
        age expired and reload it on next access; save hooks do not run,
        so audit columns are left alone.

        Returns:
            Number of rows updated
        """
        stmt = (
            update(Member)
            .where(Member.age >= age)
            .values(age=Member.age + 1)
            .execution_options(synchronize_session=False)
        )
        with translate_errors("bulk_age_plus"):
            updated = self.db.execute(stmt).rowcount

        for obj in list(self.db.identity_map.values()):
            if isinstance(obj, Member):
                self.db.expire(obj, ["age"])
        return updated
