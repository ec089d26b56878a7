"""Help-desk answer model"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import String, Text, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from resolveit.db.base import Base


class FaqAnswer(Base):
    """Administrator-provided answer to a question asked in the help chat."""

    __tablename__ = "faq_answers"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    query: Mapped[str] = mapped_column(String(1000), unique=True, index=True)
    answer: Mapped[str] = mapped_column(Text, default="")

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<FaqAnswer {self.query[:30]!r}>"
