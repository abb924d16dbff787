"""Team repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from roster.models import Team
from roster.repositories.base import BaseRepository
from roster.repositories.specification import QuerySpec, eq


class TeamRepository(BaseRepository[Team]):
    """Queries over teams. Deleting a team leaves its members without one."""

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, Team, **kwargs)

    def find_by_name(self, name: str) -> List[Team]:
        return self.find_by(QuerySpec.of(eq("name", name)))

    def find_one_by_name(self, name: str) -> Optional[Team]:
        return self.find_one_by(QuerySpec.of(eq("name", name)))
