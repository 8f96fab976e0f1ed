"""
Answer submission and deletion.

An answersheet and its answerpoints are written and removed as one unit:
either every row lands or none does. Callers get a ``WriteResult`` back and
never see a partially saved answersheet.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, exists, func, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from passi.db.gateway import SchemaGateway, fetch_all, fetch_one, fetch_scalar
from passi.models.answer import Answerpoint, Answersheet
from passi.models.worksheet import Distro, Option, Waypoint
from passi.schemas.answer import (
    AnswerpointCreate,
    AnswerpointRead,
    AnswersheetCreate,
    AnswersheetRead,
)
from passi.services.results import ErrorKind, WriteResult

logger = logging.getLogger(__name__)


def is_answer_exist(gateway: SchemaGateway, worksheet_id: int, user_id: int) -> bool:
    with gateway.snapshot() as db:
        return bool(
            fetch_scalar(
                db,
                select(
                    exists().where(
                        Answersheet.worksheet_id == worksheet_id,
                        Answersheet.user_id == user_id,
                    )
                ),
            )
        )


def _reference_problem(db: Session, sheet: AnswersheetCreate) -> Optional[str]:
    """Returns why the submission does not fit the worksheet, or None."""
    distributed = fetch_scalar(
        db,
        select(func.count(Distro.id)).where(
            Distro.worksheet_id == sheet.worksheet_id, Distro.group_id == sheet.group_id
        ),
        default=0,
    )
    if not distributed:
        return "Worksheet is not distributed to this group"

    waypoint_ids = set(
        fetch_all(db, select(Waypoint.id).where(Waypoint.worksheet_id == sheet.worksheet_id))
    )
    answered = [p.waypoint_id for p in sheet.answerpoints]
    if len(answered) != len(set(answered)):
        return "Waypoint answered more than once"
    stray = set(answered) - waypoint_ids
    if stray:
        return f"Waypoints {sorted(stray)} do not belong to worksheet {sheet.worksheet_id}"

    chosen = {p.option_id: p.waypoint_id for p in sheet.answerpoints if p.option_id is not None}
    if chosen:
        owners = dict(
            fetch_all(db, select(Option.id, Option.waypoint_id).where(Option.id.in_(list(chosen))))
        )
        for option_id, waypoint_id in chosen.items():
            if owners.get(option_id) != waypoint_id:
                return f"Option {option_id} does not belong to waypoint {waypoint_id}"

    return None


def _insert_answersheet(db: Session, sheet: AnswersheetCreate) -> int:
    row = Answersheet(
        planning=sheet.planning,
        timestamp=datetime.now(timezone.utc),
        worksheet_id=sheet.worksheet_id,
        group_id=sheet.group_id,
        user_id=sheet.user_id,
    )
    db.add(row)
    db.flush()
    return row.id


def _insert_answerpoints(
    db: Session, answersheet_id: int, points: list[AnswerpointCreate]
) -> None:
    if not points:
        return
    db.execute(
        insert(Answerpoint),
        [
            {
                "answer_text": p.answer_text,
                "image_url": p.image_url,
                "answersheet_id": answersheet_id,
                "waypoint_id": p.waypoint_id,
                "option_id": p.option_id,
            }
            for p in points
        ],
    )


def save_answer(gateway: SchemaGateway, sheet: AnswersheetCreate) -> WriteResult:
    """
    Inserts the answersheet, then all of its answerpoints, in one transaction.

    The caller checks ownership and ``is_answer_exist`` first. A concurrent
    duplicate that slips past that check is stopped by the unique
    (worksheet, user) constraint and reported as CONFLICT.
    """
    try:
        with gateway.transaction() as db:
            problem = _reference_problem(db, sheet)
            if problem:
                logger.warning(
                    "Rejected answer for worksheet %s by user %s: %s",
                    sheet.worksheet_id,
                    sheet.user_id,
                    problem,
                )
                return WriteResult.failure(ErrorKind.INVALID, problem)

            answersheet_id = _insert_answersheet(db, sheet)
            _insert_answerpoints(db, answersheet_id, sheet.answerpoints)
    except IntegrityError:
        logger.warning(
            "Duplicate answer for worksheet %s by user %s", sheet.worksheet_id, sheet.user_id
        )
        return WriteResult.failure(ErrorKind.CONFLICT, "Worksheet already answered")
    except SQLAlchemyError:
        logger.exception(
            "Saving answer for worksheet %s by user %s failed, rolled back",
            sheet.worksheet_id,
            sheet.user_id,
        )
        return WriteResult.failure(ErrorKind.TRANSACTION_FAILURE, "Could not save answer")

    logger.info(
        "Saved answersheet %s (%d answerpoints)", answersheet_id, len(sheet.answerpoints)
    )
    return WriteResult.success(answersheet_id)


def _delete_answerpoints(db: Session, answersheet_id: int) -> None:
    db.execute(delete(Answerpoint).where(Answerpoint.answersheet_id == answersheet_id))


def _delete_answersheet(db: Session, answersheet_id: int) -> None:
    db.execute(delete(Answersheet).where(Answersheet.id == answersheet_id))


def delete_answer(gateway: SchemaGateway, worksheet_id: int, user_id: int) -> WriteResult:
    # answerpoints go first, the answersheet row is referenced by them
    try:
        with gateway.transaction() as db:
            answersheet_id = fetch_scalar(
                db,
                select(Answersheet.id).where(
                    Answersheet.worksheet_id == worksheet_id, Answersheet.user_id == user_id
                ),
            )
            if answersheet_id is None:
                return WriteResult.failure(ErrorKind.NOT_FOUND, "Answer not found")

            _delete_answerpoints(db, answersheet_id)
            _delete_answersheet(db, answersheet_id)
    except SQLAlchemyError:
        logger.exception(
            "Deleting answer for worksheet %s by user %s failed, rolled back",
            worksheet_id,
            user_id,
        )
        return WriteResult.failure(ErrorKind.TRANSACTION_FAILURE, "Could not delete answer")

    logger.info("Deleted answersheet %s", answersheet_id)
    return WriteResult.success(answersheet_id)


def get_answer(
    gateway: SchemaGateway, worksheet_id: int, group_id: int, user_id: int
) -> Optional[AnswersheetRead]:
    with gateway.snapshot() as db:
        sheet = fetch_one(
            db,
            select(Answersheet).where(
                Answersheet.worksheet_id == worksheet_id,
                Answersheet.group_id == group_id,
                Answersheet.user_id == user_id,
            ),
        )
        if sheet is None:
            return None

        rows = fetch_all(
            db,
            select(Answerpoint, Option.text)
            .outerjoin(Option, Answerpoint.option_id == Option.id)
            .where(Answerpoint.answersheet_id == sheet.id)
            .order_by(Answerpoint.id),
        )

        points = []
        for point, option_text in rows:
            read = AnswerpointRead.model_validate(point)
            read.option_text = option_text
            points.append(read)

        return AnswersheetRead(
            id=sheet.id,
            worksheet_id=sheet.worksheet_id,
            group_id=sheet.group_id,
            user_id=sheet.user_id,
            planning=sheet.planning,
            timestamp=sheet.timestamp,
            instructor_comment=sheet.instructor_comment,
            feedback_complete=bool(sheet.feedback_complete),
            answerpoints=points,
        )
