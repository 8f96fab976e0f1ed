from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from passi.db.base_class import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    worksheets = relationship("Worksheet", back_populates="category")


class Worksheet(Base):
    __tablename__ = "worksheets"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    header: Mapped[str] = mapped_column(String(255), nullable=False)
    preface: Mapped[str | None] = mapped_column(Text)
    planning: Mapped[str | None] = mapped_column(Text)
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id"), nullable=False, index=True
    )

    category = relationship("Category", back_populates="worksheets")

    waypoints = relationship(
        "Waypoint",
        back_populates="worksheet",
        cascade="all, delete-orphan",
        order_by="Waypoint.id",
    )

    distros = relationship("Distro", back_populates="worksheet", cascade="all, delete-orphan")


class Distro(Base):
    """Distribution of a worksheet to a group."""

    __tablename__ = "distros"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    worksheet_id: Mapped[int] = mapped_column(
        ForeignKey("worksheets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    group_id: Mapped[int] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint("worksheet_id", "group_id", name="uq_distros_worksheet_group"),
    )

    worksheet = relationship("Worksheet", back_populates="distros")


class Waypoint(Base):
    __tablename__ = "waypoints"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    task: Mapped[str] = mapped_column(Text, nullable=False)
    photo_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    worksheet_id: Mapped[int] = mapped_column(
        ForeignKey("worksheets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    worksheet = relationship("Worksheet", back_populates="waypoints")

    options = relationship(
        "Option", back_populates="waypoint", cascade="all, delete-orphan", order_by="Option.id"
    )


class Option(Base):
    __tablename__ = "options"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    text: Mapped[str] = mapped_column(String(255), nullable=False)
    waypoint_id: Mapped[int] = mapped_column(
        ForeignKey("waypoints.id", ondelete="CASCADE"), nullable=False, index=True
    )

    waypoint = relationship("Waypoint", back_populates="options")
