from sqlalchemy import func, select

from passi.core.config import ROLE_STUDENT
from passi.models.group import Member
from passi.models.user import User
from passi.schemas.user import UserCreate
from passi.services.directory import (
    add_user,
    find_credential,
    find_user,
    is_correct_user,
    is_group_exist,
    is_member,
    join_user_into_group,
    load_credentials,
)
from passi.services.results import ErrorKind


def _memberships(db, user_id):
    return db.scalar(select(func.count(Member.id)).where(Member.user_id == user_id))


def test_find_user_lists_groups_with_instructors(gateway, seed_data):
    profile = find_user(gateway, "alice")

    assert profile.id == seed_data.alice_id
    assert profile.firstname == "Alice"
    assert [g.id for g in profile.groups] == [5]
    instructors = profile.groups[0].instructors
    assert [i.id for i in instructors] == [seed_data.olli_id]
    assert instructors[0].email == "olli@example.com"


def test_find_user_by_email(gateway, seed_data):
    profile = find_user(gateway, "bob@example.com")

    assert profile.username == "bob"
    assert [g.name for g in profile.groups] == ["Warehouse course"]
    # group 6 has no instructor
    assert profile.groups[0].instructors == []


def test_find_unknown_user_returns_none(gateway):
    assert find_user(gateway, "nobody") is None


def test_is_correct_user(gateway, seed_data):
    assert is_correct_user(gateway, seed_data.alice_id, "alice") is True
    assert is_correct_user(gateway, seed_data.alice_id, "Alice") is True
    assert is_correct_user(gateway, seed_data.alice_id, "bob") is False
    assert is_correct_user(gateway, 424242, "alice") is False


def test_is_group_exist(gateway):
    assert is_group_exist(gateway, "forklift-5") is True
    assert is_group_exist(gateway, "no-such-key") is False


def test_join_with_unknown_key_creates_nothing(gateway, db, seed_data):
    result = join_user_into_group(gateway, "no-such-key", seed_data.bob_id)

    assert not result
    assert result.error is ErrorKind.NOT_FOUND
    assert _memberships(db, seed_data.bob_id) == 1


def test_join_creates_one_membership_and_repeat_conflicts(gateway, db, seed_data):
    first = join_user_into_group(gateway, "forklift-5", seed_data.bob_id)

    assert first
    assert first.id == 5
    assert is_member(gateway, seed_data.bob_id, 5) is True
    assert _memberships(db, seed_data.bob_id) == 2

    again = join_user_into_group(gateway, "forklift-5", seed_data.bob_id)

    assert not again
    assert again.error is ErrorKind.CONFLICT
    assert _memberships(db, seed_data.bob_id) == 2


def test_join_for_unknown_user_fails_closed(gateway, db):
    result = join_user_into_group(gateway, "forklift-5", 424242)

    assert not result
    assert db.scalar(select(func.count(Member.id)).where(Member.user_id == 424242)) == 0


def test_add_user_stores_lowercase_student(gateway, db):
    payload = UserCreate(
        username="Carla",
        email="carla@example.com",
        password="password123",
        firstname="Carla",
    )

    result = add_user(gateway, payload, "opaque-hash")

    assert result
    user = db.get(User, result.id)
    assert user.username == "carla"
    assert user.password == "opaque-hash"
    assert user.role.role_id == ROLE_STUDENT


def test_add_user_rejects_taken_username_or_email(gateway):
    taken_name = UserCreate(username="ALICE", email="other@example.com", password="password123")
    taken_email = UserCreate(username="alice2", email="alice@example.com", password="password123")

    assert add_user(gateway, taken_name, "x").error is ErrorKind.CONFLICT
    assert add_user(gateway, taken_email, "x").error is ErrorKind.CONFLICT


def test_credentials_cover_students_only(gateway, seed_data):
    usernames = [c.username for c in load_credentials(gateway)]

    assert usernames == ["alice", "bob"]
    assert find_credential(gateway, seed_data.alice_id).username == "alice"
    assert find_credential(gateway, seed_data.olli_id) is None


def test_username_that_is_someone_elses_email_is_rejected(gateway):
    as_username = UserCreate(
        username="Bob@example.com", email="carol@example.net", password="password123"
    )

    result = add_user(gateway, as_username, "x")

    assert result.error is ErrorKind.CONFLICT


def test_email_that_is_someone_elses_username_is_rejected(gateway):
    first = add_user(
        gateway,
        UserCreate(username="carol@example.net", email="carol@example.org", password="password123"),
        "x",
    )
    assert first

    second = add_user(
        gateway,
        UserCreate(username="dave", email="carol@example.net", password="password123"),
        "x",
    )

    assert second.error is ErrorKind.CONFLICT


def test_username_only_lookup_skips_email_match(gateway, seed_data):
    assert find_user(gateway, "alice@example.com", by_email=False) is None
    assert find_user(gateway, "alice", by_email=False).id == seed_data.alice_id
    assert find_user(gateway, "alice@example.com").id == seed_data.alice_id
