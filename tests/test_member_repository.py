"""Member repository: CRUD, declared queries, projections and eager loading."""

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import InvalidRequestError

from roster.core.constants import DeletePolicy
from roster.core.exceptions import (
    ConstraintViolationError,
    EntityNotFoundError,
    InvalidQueryError,
    NonUniqueResultError,
)
from roster.models import Member, Team
from roster.repositories import MemberRepository, Sort
from roster.schemas import MemberDto


def test_basic_crud(member_repo):
    member1 = member_repo.save(Member("member1"))
    member2 = member_repo.save(Member("member2"))

    assert member_repo.find_by_id(member1.id) == member1
    assert member_repo.find_by_id(member2.id) == member2

    assert len(member_repo.find_all()) == 2
    assert member_repo.count() == 2

    member_repo.delete(member1)
    member_repo.delete(member2)

    assert member_repo.count() == 0


def test_save_assigns_identity_once(member_repo):
    member = Member("member1", 10)
    assert member.id is None

    saved = member_repo.save(member)
    assigned = saved.id
    assert saved is member
    assert isinstance(assigned, int)

    member.age = 11
    member_repo.save(member)
    assert member.id == assigned
    assert member_repo.count() == 1


def test_found_entity_equals_saved_after_expunge(db, member_repo):
    member = member_repo.save(Member("member1", 10))
    db.expunge(member)

    found = member_repo.find_by_id(member.id)

    assert found is not member
    assert found == member
    assert hash(found) == hash(member)
    assert found.username == "member1"
    assert found.age == 10


def test_unsaved_entities_only_equal_themselves():
    a = Member("member1")
    b = Member("member1")
    assert a == a
    assert a != b


def test_find_by_id_missing_returns_none(member_repo):
    assert member_repo.find_by_id(12345) is None
    assert member_repo.find_by_id(None) is None
    assert member_repo.exists_by_id(12345) is False


def test_count_after_saving_and_deleting(member_repo):
    members = member_repo.save_all(Member(f"member{i}", i) for i in range(5))
    for member in members[:2]:
        member_repo.delete(member)

    assert member_repo.count() == 3
    assert not member_repo.exists_by_id(members[0].id)
    assert member_repo.exists_by_id(members[4].id)


def test_delete_missing_raises_by_default(member_repo):
    member = member_repo.save(Member("member1"))
    member_repo.delete(member)

    with pytest.raises(EntityNotFoundError) as exc_info:
        member_repo.delete(member)
    assert exc_info.value.entity_id == member.id


def test_delete_unsaved_raises(member_repo):
    with pytest.raises(EntityNotFoundError):
        member_repo.delete(Member("never-saved"))


def test_delete_missing_ignored_with_ignore_policy(db, audit_hook):
    repo = MemberRepository(db, hooks=[audit_hook], delete_policy=DeletePolicy.IGNORE)
    member = repo.save(Member("member1"))

    repo.delete(member)
    repo.delete(member)
    repo.delete_by_id(999)

    assert repo.count() == 0


def test_delete_all(member_repo):
    member_repo.save_all([Member("a"), Member("b"), Member("c")])
    assert member_repo.delete_all() == 3
    assert member_repo.count() == 0


def test_find_all_by_id(member_repo):
    a, b, c = member_repo.save_all([Member("a"), Member("b"), Member("c")])
    found = member_repo.find_all_by_id([a.id, c.id])
    assert {m.username for m in found} == {"a", "c"}
    assert member_repo.find_all_by_id([]) == []


def test_find_by_username_and_age_greater_than(member_repo):
    member_repo.save(Member("member1", 100))
    member_repo.save(Member("member2", 200))

    found = member_repo.find_by_username_and_age_greater_than("member1", 99)
    assert len(found) == 1
    assert found[0].username == "member1"
    assert found[0].age == 100

    assert member_repo.find_by_username_and_age_greater_than("member1", 100) == []
    assert member_repo.find_by_username_and_age_greater_than("member3", 0) == []


def test_find_member_named_query(member_repo):
    member_repo.save(Member("member1", 100))
    member_repo.save(Member("member1", 50))

    found = member_repo.find_member("member1", 100)

    assert [m.age for m in found] == [100]


def test_find_one_by_username(member_repo):
    member_repo.save(Member("solo", 1))
    member_repo.save(Member("twin", 2))
    member_repo.save(Member("twin", 3))

    assert member_repo.find_one_by_username("solo").age == 1
    assert member_repo.find_one_by_username("nobody") is None
    with pytest.raises(NonUniqueResultError) as exc_info:
        member_repo.find_one_by_username("twin")
    assert exc_info.value.count == 2


def test_find_usernames(member_repo):
    member_repo.save_all([Member("b"), Member("a")])
    assert member_repo.find_usernames() == ["b", "a"]


def test_find_member_dto(member_repo, team_repo):
    team = team_repo.save(Team(name="teamA"))
    member_repo.save(Member("sanghun", 20, team))
    member_repo.save(Member("loner", 30))

    dtos = member_repo.find_member_dto()

    assert dtos[0] == MemberDto.from_entity(member_repo.find_one_by_username("sanghun"))
    assert dtos[0].username == "sanghun"
    assert dtos[0].age == 20
    assert dtos[0].team.name == "teamA"
    assert dtos[0].team.id == team.id
    assert dtos[1].username == "loner"
    assert dtos[1].team is None


def test_find_by_names(member_repo):
    member_repo.save(Member("member1", 100))
    member_repo.save(Member("member2", 200))
    member_repo.save(Member("member3", 300))

    found = member_repo.find_by_names({"member1", "member2"})

    assert sorted(m.username for m in found) == ["member1", "member2"]
    assert member_repo.find_by_names(set()) == []
    assert member_repo.find_by_names(["ghost"]) == []


def test_team_is_not_lazy_loaded(db, member_repo, team_repo):
    team = team_repo.save(Team(name="teamA"))
    member_repo.save(Member("member1", 10, team))
    db.expunge_all()

    member = member_repo.find_one_by_username("member1")

    with pytest.raises(InvalidRequestError):
        member.team


def test_find_by_id_with_relations(db, member_repo, team_repo):
    team = team_repo.save(Team(name="teamA"))
    member = member_repo.save(Member("member1", 10, team))
    db.expunge_all()

    found = member_repo.find_by_id(member.id, with_relations=("team",))

    assert found.team.name == "teamA"


def test_find_all_with_relations_includes_teamless(db, member_repo, team_repo):
    team = team_repo.save(Team(name="teamA"))
    member_repo.save(Member("member1", 10, team))
    member_repo.save(Member("member2", 20))
    db.expunge_all()

    members = member_repo.find_all(sort=Sort.by("username"), with_relations=("team",))

    assert [(m.username, m.team.name if m.team else None) for m in members] == [
        ("member1", "teamA"),
        ("member2", None),
    ]


def test_unknown_relation_rejected(member_repo):
    with pytest.raises(InvalidQueryError):
        member_repo.find_all(with_relations=("department",))


def test_find_member_fetch_join(db, member_repo, team_repo):
    team_a = team_repo.save(Team(name="teamA"))
    team_b = team_repo.save(Team(name="teamB"))
    member_repo.save(Member("member1", 10, team_a))
    member_repo.save(Member("member2", 20, team_b))
    member_repo.save(Member("member3", 30))
    db.expunge_all()

    members = member_repo.find_member_fetch_join()

    assert [m.team.name if m.team else None for m in members] == ["teamA", "teamB", None]


def test_find_member_custom(member_repo):
    for i in range(1, 4):
        member_repo.save(Member(f"member{i}", 10))

    members = member_repo.find_member_custom()

    assert [m.username for m in members] == ["member1", "member2", "member3"]


def test_bulk_age_plus(member_repo):
    member_repo.save_all(Member(f"member{age}", age) for age in (10, 19, 20, 21, 40))

    updated = member_repo.bulk_age_plus(20)

    assert updated == 3
    ages = [m.age for m in member_repo.find_all(sort=Sort.by("id"))]
    assert ages == [10, 19, 21, 22, 41]


def test_save_detached_entity_merges(db, member_repo):
    member = member_repo.save(Member("member1", 10))
    db.expunge(member)
    member.username = "renamed"

    merged = member_repo.save(member)

    assert merged is not member
    assert merged.id == member.id
    assert member_repo.find_by_username("renamed") == [merged]
    assert member_repo.find_by_username("member1") == []


def test_save_transient_entity_with_existing_id_updates(db, member_repo):
    member_id = member_repo.save(Member("member1", 10)).id
    db.expunge_all()

    updated = member_repo.save(Member("renamed", 11, id=member_id))

    assert updated.id == member_id
    assert member_repo.count() == 1
    assert updated.username == "renamed"
    assert updated.age == 11
    assert updated.created_by == "tester"
    assert updated.modified_by == "tester"
    assert updated.modified_at is not None


def test_save_deleted_entity_raises(member_repo):
    member = member_repo.save(Member("member1", 10))
    member_repo.delete(member)
    member.username = "renamed"

    with pytest.raises(EntityNotFoundError):
        member_repo.save(member)

    assert member_repo.count() == 0


def test_foreign_key_violation_is_translated(member_repo):
    member = Member("member1")
    member.team_id = 9999

    with pytest.raises(ConstraintViolationError):
        member_repo.save(member)


def test_change_team(db, member_repo, team_repo):
    team_a = team_repo.save(Team(name="teamA"))
    team_b = team_repo.save(Team(name="teamB"))
    member = member_repo.save(Member("member1", 10, team_a))

    member.change_team(team_b)
    member_repo.save(member)

    assert member.team is team_b
    assert member.team_id == team_b.id

    db.expunge_all()
    loaded_a = team_repo.find_by_id(team_a.id, with_relations=("members",))
    loaded_b = team_repo.find_by_id(team_b.id, with_relations=("members",))
    assert loaded_a.members == []
    assert [m.username for m in loaded_b.members] == ["member1"]


@pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
def test_joining_persisted_team_leaves_members_unloaded(member_repo, team_repo):
    team = team_repo.save(Team(name="teamA"))

    first = Member("member1", 10, team)
    second = Member("member2", 20, team)
    member_repo.save(first)
    member_repo.save(second)

    assert first.team_id == second.team_id == team.id
    assert first.team is team
    assert second.team is team
    assert "members" in inspect(team).unloaded


@pytest.mark.parametrize("kwargs", [
    {"username": ""},
    {"username": "   "},
    {"username": "member1", "age": -1},
])
def test_member_validation(kwargs):
    with pytest.raises(ValueError):
        Member(**kwargs)


def test_to_dict(member_repo):
    member = member_repo.save(Member("member1", 10))
    data = member.to_dict(exclude={"created_at"})
    assert data["username"] == "member1"
    assert data["age"] == 10
    assert data["team_id"] is None
    assert "created_at" not in data
