"""Witness model"""

from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Integer, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from resolveit.db.base import Base

if TYPE_CHECKING:
    from resolveit.db.models.case import Case


class NominatedBy(str, enum.Enum):
    """Which side put the witness forward."""
    PARTY = "party"
    OPPOSITE_PARTY = "oppositeParty"


class Witness(Base):
    """Witness nominated for a case."""

    __tablename__ = "witnesses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    case_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("cases.id", ondelete="CASCADE"),
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer)

    name: Mapped[str] = mapped_column(String(255))
    contact: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str | None] = mapped_column(String(100), nullable=True)  # e.g. Party, Opposite Party
    nominated_by: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Relationships
    case: Mapped["Case"] = relationship("Case", back_populates="witnesses")

    def __repr__(self) -> str:
        return f"<Witness {self.name} ({self.case_id})>"
