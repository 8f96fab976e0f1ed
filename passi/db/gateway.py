"""
Scoped session acquisition and typed query helpers.

Every scope opens its own session from the pooled engine, so concurrent
callers never share a transaction. ``transaction()`` commits on a clean exit
and rolls back on any exception before re-raising it. ``snapshot()`` wraps a
multi-query read in a single read transaction and always rolls back.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Sequence

from sqlalchemy.sql import Executable
from sqlalchemy.orm import Session, sessionmaker

from passi.core.config import SNAPSHOT_ISOLATION_LEVEL, WRITE_ISOLATION_LEVEL
from passi.db.session import SessionLocal

logger = logging.getLogger(__name__)


class SchemaGateway:
    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        snapshot_isolation: Optional[str] = SNAPSHOT_ISOLATION_LEVEL,
        write_isolation: Optional[str] = WRITE_ISOLATION_LEVEL,
    ):
        self.session_factory = session_factory
        self.snapshot_isolation = snapshot_isolation
        self.write_isolation = write_isolation

    def _open(self, isolation_level: Optional[str]) -> Session:
        session = self.session_factory()
        if isolation_level:
            # binds the connection now so the level applies to the whole scope
            session.connection(execution_options={"isolation_level": isolation_level})
        return session

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        session = self._open(self.write_isolation)
        try:
            yield session
            session.commit()
        except BaseException:
            logger.debug("rolling back transaction")
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def snapshot(self) -> Iterator[Session]:
        session = self._open(self.snapshot_isolation)
        try:
            yield session
        finally:
            # read-only scope: never commit
            try:
                session.rollback()
            finally:
                session.close()


def fetch_all(session: Session, stmt: Executable) -> Sequence[Any]:
    """Rows of a single-entity/column select come back unwrapped."""
    result = session.execute(stmt)
    if len(result.keys()) == 1:
        return result.scalars().all()
    return result.all()


def fetch_one(session: Session, stmt: Executable) -> Optional[Any]:
    result = session.execute(stmt)
    if len(result.keys()) == 1:
        return result.scalars().first()
    return result.first()


def fetch_scalar(session: Session, stmt: Executable, default: Any = None) -> Any:
    value = session.execute(stmt).scalar()
    return default if value is None else value
