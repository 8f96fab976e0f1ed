from passi.db.base import Base
from passi.db.session import engine


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
