"""Auth routes — administrator login"""

from pydantic import BaseModel
from fastapi import APIRouter

from resolveit.core.exceptions import AuthenticationError
from resolveit.core.logging import log
from resolveit.core.security import issue_admin_token, verify_admin_credentials

router = APIRouter()


class LoginRequest(BaseModel):
    username: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    message: str = "Login successful"


@router.post("/admin-login", response_model=LoginResponse)
async def admin_login(request: LoginRequest):
    """Exchange the administrator credentials for a 24 hour bearer token."""
    if not verify_admin_credentials(request.username, request.password):
        log.warning("Failed admin login attempt")
        raise AuthenticationError("Invalid credentials")

    log.info("Admin logged in")
    return LoginResponse(token=issue_admin_token())
