"""Disputant registration routes"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, status

from resolveit.api.dependencies import Lifecycle
from resolveit.api.schemas import (
    UserRegisteredResponse,
    UserSummary,
    user_to_response,
    user_to_summary,
)

router = APIRouter()


@router.post(
    "/register-user",
    response_model=UserRegisteredResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    lifecycle: Lifecycle,
    raw: Annotated[Any, Body()] = None,
):
    """Register a disputant. Emails are unique."""
    user = await lifecycle.register_user(raw)
    return UserRegisteredResponse(
        message="User registered successfully!",
        user=user_to_response(user),
    )


@router.get("/users", response_model=list[UserSummary])
async def list_users(lifecycle: Lifecycle):
    """Registered users, for the case filing form."""
    return [user_to_summary(u) for u in await lifecycle.list_users()]
