"""
Test infrastructure: in-memory SQLite, per-test schema, repositories
with a deterministic audit clock.

DATABASE_URL is set before anything from roster is imported, so the
package-level engine points at the in-memory database.
"""

import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DELETE_POLICY"] = "error"

from datetime import datetime, timedelta, UTC  # noqa: E402

import pytest  # noqa: E402

from roster.database import SessionLocal, create_all_tables, drop_all_tables, engine  # noqa: E402
from roster.repositories import AuditHook, MemberRepository, TeamRepository  # noqa: E402

TEST_ACTOR = "tester"


class TickingClock:
    """Returns a time one step later on every call."""

    def __init__(self, start: datetime = datetime(2024, 1, 1, tzinfo=UTC), step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step
        self.calls = 0

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        self.calls += 1
        return value


@pytest.fixture
def tables():
    """Fresh schema for each test."""
    create_all_tables(engine)
    yield engine
    drop_all_tables(engine)


@pytest.fixture
def db(tables):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def audit_hook(clock):
    return AuditHook(clock=clock, actor=TEST_ACTOR)


@pytest.fixture
def member_repo(db, audit_hook):
    return MemberRepository(db, hooks=[audit_hook])


@pytest.fixture
def team_repo(db, audit_hook):
    return TeamRepository(db, hooks=[audit_hook])
