"""
Save hooks.

Repositories call every configured hook exactly once per save, before
the flush (pre_save) and after it (post_save). Nothing is wired into
SQLAlchemy's event system: a hook only runs when a repository (or the
caller) invokes it.
"""

from datetime import datetime, UTC
from typing import Callable, Optional, Union

from roster.config import settings
from roster.models.base import AuditMixin

Clock = Callable[[], datetime]
ActorSource = Union[str, Callable[[], Optional[str]], None]


def utc_now() -> datetime:
    return datetime.now(UTC)


class SaveHook:
    """Base class for repository save hooks; both callbacks default to no-ops."""

    def pre_save(self, entity, is_new: bool) -> None:
        pass

    def post_save(self, entity, is_new: bool) -> None:
        pass


class AuditHook(SaveHook):
    """
    Stamps audit columns before each save.

    New entities get created_at/created_by; existing ones get
    modified_at/modified_by. The other pair is never touched, and
    entities without AuditMixin columns are skipped.

    Args:
        clock: Returns the current time (default: aware UTC now)
        actor: Who is saving, as a string or a zero-argument callable.
               Defaults to settings.default_actor, which may be None.

    Example:
        hook = AuditHook(actor=lambda: current_user.name)
        MemberRepository(db, hooks=[hook])
    """

    def __init__(self, clock: Optional[Clock] = None, actor: ActorSource = None):
        self.clock = clock or utc_now
        self._actor = actor if actor is not None else settings.default_actor

    def current_actor(self) -> Optional[str]:
        return self._actor() if callable(self._actor) else self._actor

    def pre_save(self, entity, is_new: bool) -> None:
        if not isinstance(entity, AuditMixin):
            return

        now = self.clock()
        actor = self.current_actor()
        if is_new:
            entity.created_at = now
            entity.created_by = actor
        else:
            entity.modified_at = now
            entity.modified_by = actor
