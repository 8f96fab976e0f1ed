"""
User and group lookups, ownership checks and membership writes.
"""

import logging
from typing import Optional

from sqlalchemy import exists, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from passi.core.config import ROLE_INSTRUCTOR, ROLE_STUDENT
from passi.core.credentials import Credential
from passi.db.gateway import SchemaGateway, fetch_all, fetch_one, fetch_scalar
from passi.models.group import Group, Member
from passi.models.user import User, UserRole
from passi.schemas.user import GroupRead, InstructorRead, UserCreate, UserProfile
from passi.services.results import ErrorKind, WriteResult

logger = logging.getLogger(__name__)


def _normalize(username: str) -> str:
    return username.strip().lower()


def find_user(
    gateway: SchemaGateway, username_or_email: str, by_email: bool = True
) -> Optional[UserProfile]:
    """
    Returns the user with their groups, each group listing its instructors.

    With ``by_email`` an identifier that is nobody's username is also tried
    as an email address. Authenticated callers pass ``by_email=False``.

    Three-level fan-out (user, groups, instructors per group) read inside one
    snapshot scope.
    """
    ident = username_or_email.strip()

    with gateway.snapshot() as db:
        user = fetch_one(db, select(User).where(User.username == ident.lower()))
        if user is None and by_email:
            user = fetch_one(db, select(User).where(User.email == ident))
        if user is None:
            return None

        groups = fetch_all(
            db,
            select(Group)
            .join(Member, Member.group_id == Group.id)
            .where(Member.user_id == user.id)
            .order_by(Group.id),
        )

        group_rows: list[GroupRead] = []
        for group in groups:
            instructors = fetch_all(
                db,
                select(User)
                .join(Member, Member.user_id == User.id)
                .join(UserRole, UserRole.user_id == User.id)
                .where(UserRole.role_id == ROLE_INSTRUCTOR, Member.group_id == group.id)
                .order_by(User.id),
            )
            group_rows.append(
                GroupRead(
                    id=group.id,
                    name=group.name,
                    instructors=[InstructorRead.model_validate(i) for i in instructors],
                )
            )

        return UserProfile(
            id=user.id,
            username=user.username,
            firstname=user.firstname,
            lastname=user.lastname,
            email=user.email,
            groups=group_rows,
        )


def is_correct_user(gateway: SchemaGateway, user_id: int, username: str) -> bool:
    with gateway.snapshot() as db:
        count = fetch_scalar(
            db,
            select(func.count(User.id)).where(
                User.id == user_id, User.username == _normalize(username)
            ),
            default=0,
        )
    return count == 1


def is_group_exist(gateway: SchemaGateway, join_key: str) -> bool:
    with gateway.snapshot() as db:
        return bool(fetch_scalar(db, select(exists().where(Group.join_key == join_key))))


def join_user_into_group(gateway: SchemaGateway, join_key: str, user_id: int) -> WriteResult:
    try:
        with gateway.transaction() as db:
            group_id = fetch_scalar(db, select(Group.id).where(Group.join_key == join_key))
            if group_id is None:
                return WriteResult.failure(ErrorKind.NOT_FOUND, "Group not found")

            already_member = fetch_scalar(
                db,
                select(func.count(Member.id)).where(
                    Member.user_id == user_id, Member.group_id == group_id
                ),
                default=0,
            )
            if already_member:
                return WriteResult.failure(ErrorKind.CONFLICT, "Already a member of this group")

            db.add(Member(user_id=user_id, group_id=group_id))
            db.flush()
    except IntegrityError:
        logger.warning("Membership insert rejected (user=%s, key=%s)", user_id, join_key)
        return WriteResult.failure(ErrorKind.CONFLICT, "Membership rejected")
    except SQLAlchemyError:
        logger.exception("Joining user %s into group failed", user_id)
        return WriteResult.failure(ErrorKind.TRANSACTION_FAILURE, "Could not join group")

    logger.info("User %s joined group %s", user_id, group_id)
    return WriteResult.success(group_id)


def add_user(gateway: SchemaGateway, payload: UserCreate, password_hash: str) -> WriteResult:
    """Registers a student. ``password_hash`` is stored as given."""
    username = _normalize(payload.username)

    try:
        with gateway.transaction() as db:
            taken = fetch_scalar(
                db,
                select(func.count(User.id)).where(
                    or_(
                        User.username == username,
                        User.email == payload.email,
                        # a username must never read as somebody else's email
                        func.lower(User.email) == username,
                        User.username == payload.email.lower(),
                    )
                ),
                default=0,
            )
            if taken:
                return WriteResult.failure(
                    ErrorKind.CONFLICT, "Username or email already registered"
                )

            user = User(
                username=username,
                password=password_hash,
                firstname=payload.firstname,
                lastname=payload.lastname,
                email=payload.email,
            )
            user.role = UserRole(role_id=ROLE_STUDENT)
            db.add(user)
            db.flush()
            user_id = user.id
    except IntegrityError:
        logger.warning("Registration rejected for %s", username)
        return WriteResult.failure(ErrorKind.CONFLICT, "Username or email already registered")
    except SQLAlchemyError:
        logger.exception("Registration failed for %s", username)
        return WriteResult.failure(ErrorKind.TRANSACTION_FAILURE, "Could not register user")

    return WriteResult.success(user_id)


def _credential_query():
    return (
        select(User.id, User.username, User.password)
        .join(UserRole, UserRole.user_id == User.id)
        .where(UserRole.role_id == ROLE_STUDENT)
    )


def find_credential(gateway: SchemaGateway, user_id: int) -> Optional[Credential]:
    with gateway.snapshot() as db:
        row = fetch_one(db, _credential_query().where(User.id == user_id))
    if row is None:
        return None
    return Credential(user_id=row.id, username=row.username, password_hash=row.password)


def load_credentials(gateway: SchemaGateway) -> list[Credential]:
    """Login principals are the students; instructors work from another client."""
    with gateway.snapshot() as db:
        rows = fetch_all(db, _credential_query().order_by(User.id))
    return [
        Credential(user_id=r.id, username=r.username, password_hash=r.password) for r in rows
    ]


def is_member(gateway: SchemaGateway, user_id: int, group_id: int) -> bool:
    with gateway.snapshot() as db:
        return bool(
            fetch_scalar(
                db,
                select(exists().where(Member.user_id == user_id, Member.group_id == group_id)),
            )
        )
