from passi.db.base_class import Base  # noqa: F401

# import models so SQLAlchemy registers them on Base.metadata
from passi.models import answer, group, user, worksheet  # noqa: F401
