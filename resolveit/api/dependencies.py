"""FastAPI dependencies"""

from typing import Annotated, Any

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from resolveit.cases.lifecycle import CaseLifecycleService
from resolveit.core.exceptions import AuthenticationError, AuthorizationError
from resolveit.core.logging import log
from resolveit.core.security import ADMIN_ROLE, decode_access_token
from resolveit.core.storage import FileStore
from resolveit.db.session import get_db
from resolveit.events.broadcaster import EventBroadcaster, broadcaster
from resolveit.tasks.scheduler import TransitionScheduler, get_scheduler


async def get_current_admin(
    authorization: Annotated[str | None, Header()] = None,
) -> dict[str, Any]:
    """Claims of a valid administrator token.

    No token or a bad/expired token is a 401; a valid token for any other
    role is a 403.
    """
    if not authorization:
        raise AuthenticationError("No token provided")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Invalid authorization header format")

    try:
        payload = decode_access_token(parts[1])
    except AuthenticationError as e:
        log.warning(f"Rejected admin token: {e.message}")
        raise AuthenticationError("Invalid token")

    if payload.get("role") != ADMIN_ROLE:
        raise AuthorizationError("Admin access required")
    return payload


def get_broadcaster() -> EventBroadcaster:
    return broadcaster


def get_transition_scheduler() -> TransitionScheduler:
    return get_scheduler()


def get_file_store() -> FileStore:
    return FileStore()


async def get_lifecycle(
    db: Annotated[AsyncSession, Depends(get_db)],
    scheduler: Annotated[TransitionScheduler, Depends(get_transition_scheduler)],
    events: Annotated[EventBroadcaster, Depends(get_broadcaster)],
) -> CaseLifecycleService:
    return CaseLifecycleService(db, scheduler, events)


# Type aliases for dependencies
DBSession = Annotated[AsyncSession, Depends(get_db)]
RequireAdmin = Annotated[dict[str, Any], Depends(get_current_admin)]
Lifecycle = Annotated[CaseLifecycleService, Depends(get_lifecycle)]
Storage = Annotated[FileStore, Depends(get_file_store)]
