"""
Base repository.

Generic CRUD over one mapped class, plus evaluation of QuerySpec
objects and paging. Repositories work inside the caller's Session:
they flush so that ids are assigned and constraint errors surface at
the call that caused them, but they never commit or roll back.

Usage:
    class TeamRepository(BaseRepository[Team]):
        def __init__(self, db: Session, **kwargs):
            super().__init__(db, Team, **kwargs)
"""

import logging
from typing import Any, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import Select, delete, func, inspect, select
from sqlalchemy.orm import Session

from roster.config import settings
from roster.core.constants import DeletePolicy
from roster.core.exceptions import EntityNotFoundError, NonUniqueResultError, translate_errors
from roster.models.base import Base
from roster.repositories.auditing import AuditHook, SaveHook
from roster.repositories.paging import Page, PageRequest, Sort, paginate
from roster.repositories.specification import QuerySpec, eq

ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic repository for a model with an integer `id` primary key.

    Attributes:
        db: Session supplied by the caller (owns the transaction)
        model: Mapped class this repository manages
        hooks: Save hooks run once per save, in order
        delete_policy: What delete does when the row is already gone
    """

    def __init__(
        self,
        db: Session,
        model: Type[ModelType],
        hooks: Optional[Sequence[SaveHook]] = None,
        delete_policy: Optional[DeletePolicy] = None,
    ):
        """
        Args:
            db: Database session
            model: SQLAlchemy model class
            hooks: Save hooks; defaults to a single AuditHook. Pass () for none.
            delete_policy: Defaults to settings.delete_policy
        """
        self.db = db
        self.model = model
        self.hooks: List[SaveHook] = list(hooks) if hooks is not None else [AuditHook()]
        self.delete_policy = DeletePolicy(delete_policy or settings.delete_policy)

    @property
    def model_name(self) -> str:
        return self.model.__name__

    # ========================================
    # Writes
    # ========================================

    def save(self, entity: ModelType) -> ModelType:
        """
        Insert a new entity or update an existing one.

        The entity is new when its id is None. Each hook's pre_save runs
        exactly once before the flush and post_save once after it. An
        entity that carries an id but is not attached to this session
        (detached, or built by hand with a known id) is merged and the
        session-bound copy is returned.

        Raises:
            EntityNotFoundError: The entity was deleted earlier
            ConstraintViolationError: The flush violated a constraint
            ConnectionFailureError: The database is unreachable
        """
        state = inspect(entity)
        if state.deleted or state.was_deleted:
            raise EntityNotFoundError(self.model_name, entity.id)

        is_new = entity.id is None

        for hook in self.hooks:
            hook.pre_save(entity, is_new)

        with translate_errors(f"save {self.model_name}"):
            if is_new:
                self.db.add(entity)
            elif state.transient or state.detached:
                entity = self.db.merge(entity)
            self.db.flush()

        for hook in self.hooks:
            hook.post_save(entity, is_new)

        logger.debug("%s %s id=%s", "Inserted" if is_new else "Updated", self.model_name, entity.id)
        return entity

    def save_all(self, entities: Iterable[ModelType]) -> List[ModelType]:
        return [self.save(entity) for entity in entities]

    def delete(self, entity: ModelType) -> None:
        """
        Delete an entity by its identity.

        Raises:
            EntityNotFoundError: The row is already gone (DeletePolicy.ERROR only)
        """
        self.delete_by_id(entity.id)

    def delete_by_id(self, entity_id: Any) -> None:
        """Delete the row with this id, subject to the delete policy."""
        existing = self.find_by_id(entity_id)
        if existing is None:
            if self.delete_policy is DeletePolicy.ERROR:
                raise EntityNotFoundError(self.model_name, entity_id)
            logger.info("Ignoring delete of missing %s id=%s", self.model_name, entity_id)
            return

        with translate_errors(f"delete {self.model_name}"):
            self.db.delete(existing)
            self.db.flush()
        logger.debug("Deleted %s id=%s", self.model_name, entity_id)

    def delete_all(self) -> int:
        """Delete every row in one statement; returns the number removed."""
        with translate_errors(f"delete all {self.model_name}"):
            result = self.db.execute(delete(self.model))
        logger.debug("Deleted %d %s rows", result.rowcount, self.model_name)
        return result.rowcount

    # ========================================
    # Reads
    # ========================================

    def find_by_id(self, entity_id: Any, with_relations: Sequence[str] = ()) -> Optional[ModelType]:
        """
        Entity with this id, or None.

        Without relations this is an identity-map lookup and only hits
        the database on a miss. With relations it always runs a SELECT
        so relations missing from an already-loaded instance get filled.
        """
        if entity_id is None:
            return None
        if with_relations:
            spec = QuerySpec.of(eq("id", entity_id)).with_relations(*with_relations)
            return self.find_one_by(spec)
        with translate_errors(f"find {self.model_name}"):
            return self.db.get(self.model, entity_id)

    def find_all(self, sort: Optional[Sort] = None, with_relations: Sequence[str] = ()) -> List[ModelType]:
        """Every row; storage order unless a sort is given."""
        spec = QuerySpec(sort=sort, relations=tuple(with_relations))
        return self.find_by(spec)

    def find_all_by_id(self, ids: Iterable[Any]) -> List[ModelType]:
        ids = list(ids)
        if not ids:
            return []
        return self._scalars(select(self.model).where(self.model.id.in_(ids)))

    def exists_by_id(self, entity_id: Any) -> bool:
        stmt = select(func.count()).select_from(self.model).where(self.model.id == entity_id)
        with translate_errors(f"check {self.model_name}"):
            return (self.db.execute(stmt).scalar() or 0) > 0

    def count(self) -> int:
        """Number of persisted rows."""
        return self.count_by(QuerySpec())

    # ========================================
    # Specifications
    # ========================================

    def find_by(self, spec: QuerySpec, sort: Optional[Sort] = None) -> List[ModelType]:
        """
        Rows matching every condition in spec.

        Args:
            spec: Conditions, sort and relations to load
            sort: Overrides spec.sort when given
        """
        return self._scalars(self._select(spec, sort))

    def find_one_by(self, spec: QuerySpec) -> Optional[ModelType]:
        """
        The single row matching spec, or None.

        Raises:
            NonUniqueResultError: More than one row matched
        """
        results = self.find_by(spec)
        if len(results) > 1:
            raise NonUniqueResultError(self.model_name, len(results))
        return results[0] if results else None

    def count_by(self, spec: QuerySpec) -> int:
        stmt = spec.apply_filter(select(func.count()).select_from(self.model), self.model)
        with translate_errors(f"count {self.model_name}"):
            return self.db.execute(stmt).scalar() or 0

    def find_page(self, spec: QuerySpec, page_request: PageRequest) -> Page:
        """
        One page of rows matching spec.

        The page request's sort is used; if it is unsorted, spec.sort
        is used instead.
        """
        if not page_request.sort.is_sorted and spec.sort is not None:
            page_request = page_request.model_copy(update={"sort": spec.sort})
        stmt = spec.apply_filter(select(self.model), self.model)
        return paginate(self.db, stmt, page_request, self.model, options=spec.loader_options(self.model))

    # ========================================
    # Helpers
    # ========================================

    def _select(self, spec: QuerySpec, sort: Optional[Sort] = None) -> Select:
        stmt = spec.apply_filter(select(self.model), self.model)
        sort = sort if sort is not None else spec.sort
        if sort is not None and sort.is_sorted:
            stmt = stmt.order_by(*sort.to_order_by(self.model))
        options = spec.loader_options(self.model)
        if options:
            stmt = stmt.options(*options)
        return stmt

    def _scalars(self, stmt: Select) -> List[ModelType]:
        with translate_errors(f"query {self.model_name}"):
            return list(self.db.execute(stmt).scalars().all())
