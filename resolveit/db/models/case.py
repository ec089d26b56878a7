"""Case model"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING
import uuid

from sqlalchemy import (
    String,
    Text,
    Boolean,
    Integer,
    DateTime,
    JSON,
    ForeignKey,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
import enum

from resolveit.db.base import Base

if TYPE_CHECKING:
    from resolveit.db.models.user import User
    from resolveit.db.models.witness import Witness
    from resolveit.db.models.panel_member import PanelMember
    from resolveit.db.models.mediation_session import MediationSession


class CaseStatus(str, enum.Enum):
    """Mediation workflow status."""
    QUEUED = "Queued"
    AWAITING_RESPONSE = "Awaiting Response"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    PANEL_CREATED = "Panel Created"
    MEDIATION_IN_PROGRESS = "Mediation in Progress"
    RESOLVED = "Resolved"
    UNRESOLVED = "Unresolved"


class CaseType(str, enum.Enum):
    """Kinds of dispute the centre mediates."""
    FAMILY = "Family"
    BUSINESS = "Business"
    CRIMINAL = "Criminal"


class Case(Base):
    """Dispute under community mediation."""

    __tablename__ = "cases"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    case_type: Mapped[str] = mapped_column(String(20), index=True)
    issue_description: Mapped[str] = mapped_column(Text)

    # Filing party
    party_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="RESTRICT"),
        index=True,
    )

    # Opposite party (not a registered user)
    opposite_party_name: Mapped[str] = mapped_column(String(255))
    opposite_party_contact: Mapped[str] = mapped_column(String(255))
    opposite_party_address: Mapped[str] = mapped_column(Text)
    opposite_party_has_accepted: Mapped[bool] = mapped_column(Boolean, default=False)
    opposite_party_notified_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    response_deadline: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    proof: Mapped[list] = mapped_column(JSON, default=list)  # file references, in upload order

    # Court / police proceedings
    court_is_pending: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    court_case_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    court_fir_number: Mapped[str | None] = mapped_column(String(100), nullable=True)
    court_or_police_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[str] = mapped_column(
        String(30), default=CaseStatus.QUEUED.value, index=True
    )

    # Resolution
    is_resolved: Mapped[bool] = mapped_column(Boolean, default=False, index=True)
    agreement: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    satisfaction_level: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    party: Mapped["User"] = relationship(
        "User", back_populates="cases", lazy="selectin"
    )
    witnesses: Mapped[list["Witness"]] = relationship(
        "Witness",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="Witness.position",
        lazy="selectin",
    )
    panel: Mapped[list["PanelMember"]] = relationship(
        "PanelMember",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="PanelMember.position",
        lazy="selectin",
    )
    mediation_sessions: Mapped[list["MediationSession"]] = relationship(
        "MediationSession",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="MediationSession.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Case {self.id} ({self.status})>"
