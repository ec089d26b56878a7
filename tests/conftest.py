"""
Shared fixtures for ResolveIt tests.

Every test gets its own SQLite database file, transition scheduler and
broadcaster; the FastAPI app is driven in-process through httpx.
"""

import os
import tempfile
from typing import Any, AsyncGenerator

# Settings are read at import time, so the environment must be in place first.
_TEST_ROOT = tempfile.mkdtemp(prefix="resolveit-tests-")
os.environ["APP_ENV"] = "testing"
os.environ["APP_DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/bootstrap.db"
os.environ["APP_UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from resolveit.api.dependencies import (
    get_broadcaster,
    get_file_store,
    get_transition_scheduler,
)
from resolveit.api.rate_limit import get_rate_limiter
from resolveit.cases.lifecycle import CaseLifecycleService
from resolveit.core.security import issue_admin_token
from resolveit.core.storage import FileStore
from resolveit.db.base import Base, build_engine, build_session_factory
from resolveit.db.session import get_db
from resolveit.events.broadcaster import InMemoryBroadcaster
from resolveit.main import app
from resolveit.tasks.scheduler import TransitionScheduler


# =============================================================================
# Database
# =============================================================================

@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh schema in a per-test SQLite file."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'resolveit.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# =============================================================================
# Services
# =============================================================================

@pytest.fixture
def events() -> InMemoryBroadcaster:
    return InMemoryBroadcaster()


@pytest_asyncio.fixture
async def scheduler(session_factory, events) -> AsyncGenerator[TransitionScheduler, None]:
    scheduler = TransitionScheduler(session_factory, events)
    yield scheduler
    await scheduler.shutdown()


@pytest.fixture
def lifecycle(db, scheduler, events) -> CaseLifecycleService:
    return CaseLifecycleService(db, scheduler, events)


@pytest.fixture
def file_store(tmp_path) -> FileStore:
    return FileStore(upload_dir=tmp_path / "uploads", backend="local")


# =============================================================================
# HTTP
# =============================================================================

@pytest_asyncio.fixture
async def client(session_factory, scheduler, events, file_store) -> AsyncGenerator[AsyncClient, None]:
    """Client for the app with its database, scheduler and broadcaster swapped out."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_transition_scheduler] = lambda: scheduler
    app.dependency_overrides[get_broadcaster] = lambda: events
    app.dependency_overrides[get_file_store] = lambda: file_store
    get_rate_limiter().reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {issue_admin_token()}"}


# =============================================================================
# Sample payloads
# =============================================================================

def make_user_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "name": "Ayesha Khan",
        "age": 34,
        "gender": "Female",
        "address": {"street": "12 Lake View Road", "city": "Hyderabad", "zip": "500034"},
        "email": "ayesha.khan@example.org",
        "phone": "9876543210",
    }
    payload.update(overrides)
    return payload


def make_case_payload(party_id: str, **overrides: Any) -> dict[str, Any]:
    payload = {
        "caseType": "Family",
        "issueDescription": "Dispute over maintenance of the family home.",
        "partyId": party_id,
        "oppositeParty": {
            "name": "Imran Khan",
            "contact": "9000011111",
            "address": "45 Old City, Hyderabad",
        },
        "proof": [],
    }
    payload.update(overrides)
    return payload


VALID_PANEL = [
    {"name": "Adv. Meera Rao", "expertise": "Lawyer", "contact": "9000033333"},
    {"name": "Maulana Yusuf", "expertise": "Religious Scholar"},
    {"name": "K. Das", "expertise": "Community Member"},
]


@pytest_asyncio.fixture
async def registered_user(lifecycle):
    return await lifecycle.register_user(make_user_payload())


@pytest_asyncio.fixture
async def filed_case(lifecycle, registered_user):
    case, _ = await lifecycle.register_case(make_case_payload(str(registered_user.id)))
    return case
