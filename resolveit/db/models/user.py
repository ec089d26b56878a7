"""User model"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Integer, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from resolveit.db.base import Base

if TYPE_CHECKING:
    from resolveit.db.models.case import Case


class Gender(str, enum.Enum):
    """Gender as captured at registration."""
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class User(Base):
    """Registered disputant who files cases."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(255))
    age: Mapped[int] = mapped_column(Integer)
    gender: Mapped[str] = mapped_column(String(10))

    # Address
    street: Mapped[str] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100))
    zip_code: Mapped[str] = mapped_column(String(20))

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(15))
    photo: Mapped[str | None] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    cases: Mapped[list["Case"]] = relationship(
        "Case",
        back_populates="party",
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.name})>"
