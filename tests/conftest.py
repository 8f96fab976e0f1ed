import os
from types import SimpleNamespace

# Must be set before passi is imported: the engine is built at import time.
TEST_DB_FILE = "test_passi.db"
os.environ["PASSI_DATABASE_URL"] = f"sqlite:///./{TEST_DB_FILE}"
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from passi.core.config import ROLE_INSTRUCTOR, ROLE_STUDENT  # noqa: E402
from passi.core.security import hash_password  # noqa: E402
from passi.db.base import Base  # noqa: E402
from passi.db.gateway import SchemaGateway  # noqa: E402
from passi.db.session import SessionLocal, engine  # noqa: E402
from passi.main import app  # noqa: E402
from passi.models.answer import Answerpoint, Answersheet  # noqa: E402
from passi.models.group import Group, Member  # noqa: E402
from passi.models.user import User, UserRole  # noqa: E402
from passi.models.worksheet import Category, Distro, Option, Waypoint, Worksheet  # noqa: E402

PASSWORD = "password123"


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """Create a fresh schema once for the whole test session."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if os.path.exists(TEST_DB_FILE):
        os.remove(TEST_DB_FILE)


def _user(username: str, role_id: int, **fields) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        password=hash_password(PASSWORD),
        **fields,
    )
    user.role = UserRole(role_id=role_id)
    return user


@pytest.fixture(autouse=True)
def seed_data():
    """
    Seed a clean dataset for each test.

    Group 5 has worksheets 10 and 11 in category "Safety"; alice has answered
    worksheet 10. Group 6 has worksheet 12 in "Logistics".
    """
    db = SessionLocal()
    try:
        # Clear tables (child -> parent)
        for model in (
            Answerpoint,
            Answersheet,
            Option,
            Waypoint,
            Distro,
            Worksheet,
            Category,
            Member,
            UserRole,
            User,
            Group,
        ):
            db.query(model).delete()
        db.commit()

        alice = _user("alice", ROLE_STUDENT, firstname="Alice", lastname="Aalto")
        bob = _user("bob", ROLE_STUDENT, firstname="Bob", lastname="Berg")
        olli = _user("olli", ROLE_INSTRUCTOR, firstname="Olli", lastname="Opettaja")
        db.add_all([alice, bob, olli])

        db.add_all(
            [
                Group(id=5, name="Forklift course", join_key="forklift-5"),
                Group(id=6, name="Warehouse course", join_key="warehouse-6"),
                Category(id=1, name="Safety"),
                Category(id=2, name="Logistics"),
            ]
        )
        db.flush()

        db.add_all(
            [
                Member(user_id=alice.id, group_id=5),
                Member(user_id=olli.id, group_id=5),
                Member(user_id=bob.id, group_id=6),
                Worksheet(id=10, header="Pre-shift check", preface="Before driving", category_id=1),
                Worksheet(id=11, header="Route planning", category_id=1),
                Worksheet(id=12, header="Stock count", category_id=2),
            ]
        )
        db.flush()

        db.add_all(
            [
                Distro(worksheet_id=10, group_id=5),
                Distro(worksheet_id=11, group_id=5),
                Distro(worksheet_id=12, group_id=6),
                Waypoint(id=100, task="Check the brakes", photo_enabled=True, worksheet_id=10),
                Waypoint(id=101, task="Pick the right vest", worksheet_id=10),
                Waypoint(id=110, task="Describe the route", worksheet_id=11),
                Waypoint(id=120, task="Count the pallets", worksheet_id=12),
            ]
        )
        db.flush()

        db.add_all(
            [
                Option(id=1000, text="Yellow", waypoint_id=101),
                Option(id=1001, text="Orange", waypoint_id=101),
                Answersheet(
                    id=1, planning="Go slow", worksheet_id=10, group_id=5, user_id=alice.id
                ),
            ]
        )
        db.flush()

        db.add_all(
            [
                Answerpoint(answer_text="Brakes ok", answersheet_id=1, waypoint_id=100),
                Answerpoint(answersheet_id=1, waypoint_id=101, option_id=1000),
            ]
        )
        db.commit()

        yield SimpleNamespace(alice_id=alice.id, bob_id=bob.id, olli_id=olli.id)
    finally:
        db.close()


@pytest.fixture()
def gateway():
    return SchemaGateway(SessionLocal)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    with TestClient(app) as c:
        yield c
