"""Mediation panel member model"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Integer, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from resolveit.db.base import Base

if TYPE_CHECKING:
    from resolveit.db.models.case import Case


class PanelMember(Base):
    """Mediator assigned to a case panel."""

    __tablename__ = "panel_members"

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
    expertise: Mapped[str] = mapped_column(String(255))  # e.g. Lawyer, Religious Scholar, Community Member
    contact: Mapped[str | None] = mapped_column(String(255), nullable=True)

    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    case: Mapped["Case"] = relationship("Case", back_populates="panel")

    def __repr__(self) -> str:
        return f"<PanelMember {self.name} ({self.expertise})>"
