"""
Categorized worksheet tree for one (group, user) pair.

The tree is assembled level by level: categories, then the worksheets of
each category distributed to the group, then waypoints per worksheet, then
options per waypoint. Curriculum sizes are small so the per-parent queries
stay cheap. ``aggregate_worksheet_tree`` is the only place that knows the
query strategy.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from passi.db.gateway import SchemaGateway, fetch_all, fetch_scalar
from passi.models.answer import Answersheet
from passi.models.user import User
from passi.models.worksheet import Category, Distro, Option, Waypoint, Worksheet
from passi.schemas.worksheet import CategoryRead, OptionRead, WaypointRead, WorksheetRead

logger = logging.getLogger(__name__)


def _completed_column(group_id: int, user_id: Optional[int]):
    return (
        select(func.count(Answersheet.id))
        .where(
            Answersheet.group_id == group_id,
            Answersheet.user_id == user_id,
            Answersheet.worksheet_id == Worksheet.id,
        )
        .correlate(Worksheet)
        .scalar_subquery()
        .label("completed")
    )


def _waypoints(db: Session, worksheet_id: int) -> list[WaypointRead]:
    waypoints = fetch_all(
        db,
        select(Waypoint).where(Waypoint.worksheet_id == worksheet_id).order_by(Waypoint.id),
    )

    rows: list[WaypointRead] = []
    for wp in waypoints:
        options = fetch_all(
            db, select(Option).where(Option.waypoint_id == wp.id).order_by(Option.id)
        )
        rows.append(
            WaypointRead(
                id=wp.id,
                task=wp.task,
                photo_enabled=bool(wp.photo_enabled),
                options=[OptionRead.model_validate(o) for o in options],
            )
        )
    return rows


def aggregate_worksheet_tree(
    db: Session, group_id: int, user_id: Optional[int]
) -> list[CategoryRead]:
    categories = fetch_all(db, select(Category).order_by(Category.id))
    completed = _completed_column(group_id, user_id)

    tree: list[CategoryRead] = []
    for category in categories:
        rows = fetch_all(
            db,
            select(Worksheet, completed)
            .join(Distro, Distro.worksheet_id == Worksheet.id)
            .where(Distro.group_id == group_id, Worksheet.category_id == category.id)
            .order_by(Worksheet.id),
        )
        if not rows:
            continue

        worksheets = [
            WorksheetRead(
                id=ws.id,
                header=ws.header,
                preface=ws.preface,
                planning=ws.planning,
                completed=(count or 0) > 0,
                waypoints=_waypoints(db, ws.id),
            )
            for ws, count in rows
        ]
        tree.append(CategoryRead(id=category.id, name=category.name, worksheets=worksheets))

    return tree


def get_worksheets(gateway: SchemaGateway, group_id: int, username: str) -> list[CategoryRead]:
    """
    Returns the categories holding worksheets distributed to ``group_id``.

    Each worksheet carries ``completed`` for ``username``; an unknown username
    simply has nothing completed. An empty list means the group has no
    worksheets.
    """
    with gateway.snapshot() as db:
        user_id = fetch_scalar(
            db, select(User.id).where(User.username == username.strip().lower())
        )
        tree = aggregate_worksheet_tree(db, group_id, user_id)

    logger.debug(
        "Worksheet tree for group %s: %d categories", group_id, len(tree)
    )
    return tree
