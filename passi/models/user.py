from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from passi.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    # always stored lowercase
    username: Mapped[str] = mapped_column(
        String(100), unique=True, index=True, nullable=False
    )
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    firstname: Mapped[str | None] = mapped_column(String(100))
    lastname: Mapped[str | None] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    role = relationship(
        "UserRole", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    memberships = relationship(
        "Member", back_populates="user", cascade="all, delete-orphan"
    )

    answersheets = relationship("Answersheet", back_populates="user")


class UserRole(Base):
    __tablename__ = "user_role"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    role_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    user = relationship("User", back_populates="role")
