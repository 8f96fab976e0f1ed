from typing import Optional

from sqlalchemy import func, select

from passi.db.gateway import SchemaGateway, fetch_all, fetch_one
from passi.models.answer import Answersheet
from passi.models.user import User
from passi.models.worksheet import Worksheet
from passi.schemas.progress import ProgressRead


def get_progress(gateway: SchemaGateway, username: str) -> Optional[ProgressRead]:
    """
    Answered worksheets against all worksheets, across every group.
    """
    completed = (
        select(func.count(Answersheet.id))
        .join(User, User.id == Answersheet.user_id)
        .where(User.username == username.strip().lower())
        .scalar_subquery()
    )
    stmt = select(
        completed.label("completed"),
        func.count(Worksheet.id).label("total"),
    ).select_from(Worksheet)

    with gateway.snapshot() as db:
        row = fetch_one(db, stmt)

    if row is None:
        return None
    return ProgressRead(completed=row.completed or 0, total=row.total or 0)


def feedback_complete_map(gateway: SchemaGateway, group_id: int, user_id: int) -> dict[int, bool]:
    with gateway.snapshot() as db:
        rows = fetch_all(
            db,
            select(Answersheet.worksheet_id, Answersheet.feedback_complete).where(
                Answersheet.group_id == group_id, Answersheet.user_id == user_id
            ),
        )
    return {worksheet_id: bool(done) for worksheet_id, done in rows}
