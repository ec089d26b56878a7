"""Scheduled (deferred) case status transition"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import String, DateTime, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column
import enum

from resolveit.db.base import Base


class TransitionState(str, enum.Enum):
    """Lifecycle of a scheduled transition."""
    PENDING = "pending"
    DONE = "done"
    SKIPPED = "skipped"  # case had already moved on when it fired
    CANCELLED = "cancelled"


class ScheduledTransition(Base):
    """Durable record of a status change due at a later time."""

    __tablename__ = "scheduled_transitions"

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
    from_status: Mapped[str] = mapped_column(String(30))
    to_status: Mapped[str] = mapped_column(String(30))
    due_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    state: Mapped[str] = mapped_column(
        String(20), default=TransitionState.PENDING.value, index=True
    )
    reason: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return (
            f"<ScheduledTransition {self.case_id} "
            f"{self.from_status}->{self.to_status} ({self.state})>"
        )
