"""Persistence for users, cases and help-desk answers.

Repositories run queries on the request's AsyncSession and convert
driver failures into PersistenceError so callers never see SQL details.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator
import uuid

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from resolveit.core.exceptions import ConflictError, PersistenceError
from resolveit.core.logging import log
from resolveit.db.models.case import Case
from resolveit.db.models.faq_answer import FaqAnswer
from resolveit.db.models.user import User

DUPLICATE_EMAIL_ERROR = "Email already registered."


@asynccontextmanager
async def storage_errors(operation: str) -> AsyncIterator[None]:
    """Log and wrap SQLAlchemy failures raised inside the block."""
    try:
        yield
    except SQLAlchemyError as e:
        log.error(f"Storage failure during {operation}: {e}")
        raise PersistenceError(operation) from e


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: uuid.UUID) -> User | None:
        async with storage_errors("find user"):
            result = await self.db.execute(select(User).where(User.id == user_id))
            return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        async with storage_errors("find user by email"):
            result = await self.db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()

    async def list_all(self) -> list[User]:
        async with storage_errors("list users"):
            result = await self.db.execute(select(User).order_by(User.created_at))
            return list(result.scalars().all())

    async def add(self, user: User) -> User:
        """Insert a user; the unique email index backs the pre-insert check."""
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(DUPLICATE_EMAIL_ERROR) from e
        except SQLAlchemyError as e:
            log.error(f"Storage failure during save user: {e}")
            raise PersistenceError("save user") from e
        await self.db.refresh(user)
        return user


class CaseRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, case_id: uuid.UUID) -> Case | None:
        async with storage_errors("find case"):
            result = await self.db.execute(select(Case).where(Case.id == case_id))
            return result.scalar_one_or_none()

    async def find(
        self,
        status: str | None = None,
        case_type: str | None = None,
    ) -> list[Case]:
        """Cases matching the optional filters, newest first."""
        query = select(Case)
        if status:
            query = query.where(Case.status == status)
        if case_type:
            query = query.where(Case.case_type == case_type)
        async with storage_errors("list cases"):
            result = await self.db.execute(query.order_by(Case.created_at.desc()))
            return list(result.scalars().all())

    async def add(self, case: Case) -> Case:
        async with storage_errors("save case"):
            self.db.add(case)
            await self.db.flush()
            await self.db.refresh(case)
        return case

    async def save(self, case: Case, operation: str = "update case") -> Case:
        """Flush pending changes to case and its child collections."""
        async with storage_errors(operation):
            await self.db.flush()
            await self.db.refresh(case)
        return case

    async def count(self) -> int:
        async with storage_errors("count cases"):
            result = await self.db.execute(select(func.count(Case.id)))
            return result.scalar() or 0

    async def count_by_status(self) -> dict[str, int]:
        async with storage_errors("count cases by status"):
            result = await self.db.execute(
                select(Case.status, func.count(Case.id)).group_by(Case.status)
            )
            return {status: count for status, count in result.all()}

    async def count_by_type(self) -> dict[str, int]:
        async with storage_errors("count cases by type"):
            result = await self.db.execute(
                select(Case.case_type, func.count(Case.id)).group_by(Case.case_type)
            )
            return {case_type: count for case_type, count in result.all()}

    async def count_resolved(self) -> int:
        async with storage_errors("count resolved cases"):
            result = await self.db.execute(
                select(func.count(Case.id)).where(Case.is_resolved.is_(True))
            )
            return result.scalar() or 0


class FaqRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, query: str) -> FaqAnswer | None:
        async with storage_errors("find answer"):
            result = await self.db.execute(
                select(FaqAnswer).where(FaqAnswer.query == query)
            )
            return result.scalar_one_or_none()

    async def upsert(self, query: str, answer: str) -> FaqAnswer:
        """Update the stored answer for query, creating it if absent."""
        existing = await self.get(query)
        async with storage_errors("save answer"):
            if existing:
                existing.answer = answer
            else:
                existing = FaqAnswer(query=query, answer=answer)
                self.db.add(existing)
            await self.db.flush()
            await self.db.refresh(existing)
        return existing
