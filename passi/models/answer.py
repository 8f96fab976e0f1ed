from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from passi.db.base_class import Base


class Answersheet(Base):
    __tablename__ = "answersheets"

    id = Column(Integer, primary_key=True, index=True)

    planning = Column(Text, nullable=True)
    timestamp = Column(DateTime, server_default=func.now(), nullable=False)

    # Instructor side (nullable until commented)
    instructor_comment = Column(Text, nullable=True)
    feedback_complete = Column(Boolean, nullable=False, default=False)

    worksheet_id = Column(Integer, ForeignKey("worksheets.id"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("worksheet_id", "user_id", name="uq_answersheet_worksheet_user"),
    )

    user = relationship("User", back_populates="answersheets")
    answerpoints = relationship(
        "Answerpoint", back_populates="answersheet", order_by="Answerpoint.id"
    )


class Answerpoint(Base):
    __tablename__ = "answerpoints"

    id = Column(Integer, primary_key=True, index=True)

    answer_text = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)

    instructor_comment = Column(Text, nullable=True)
    instructor_rating = Column(Integer, nullable=True)

    answersheet_id = Column(Integer, ForeignKey("answersheets.id"), nullable=False, index=True)
    waypoint_id = Column(Integer, ForeignKey("waypoints.id"), nullable=False, index=True)
    option_id = Column(Integer, ForeignKey("options.id"), nullable=True)

    answersheet = relationship("Answersheet", back_populates="answerpoints")
    option = relationship("Option")
