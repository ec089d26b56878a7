"""Mediation session model"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import String, Text, Integer, DateTime, JSON, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from resolveit.db.base import Base

if TYPE_CHECKING:
    from resolveit.db.models.case import Case


class SessionStatus(str, enum.Enum):
    """Mediation session status."""
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class MediationSession(Base):
    """Scheduled mediation session for a case."""

    __tablename__ = "mediation_sessions"

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

    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(
        String(20), default=SessionStatus.SCHEDULED.value
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    attendees: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    case: Mapped["Case"] = relationship("Case", back_populates="mediation_sessions")

    def __repr__(self) -> str:
        return f"<MediationSession {self.case_id} ({self.scheduled_at})>"
