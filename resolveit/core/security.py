"""Security utilities - JWT tokens and admin credential check"""

from datetime import datetime, timedelta, timezone
import secrets
from typing import Any

from jose import JWTError, jwt

from resolveit.config import settings
from resolveit.core.exceptions import AuthenticationError

ADMIN_ROLE = "admin"


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.JWT_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT access token. Expired tokens are rejected."""
    try:
        return jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {str(e)}")


def verify_admin_credentials(username: str | None, password: str | None) -> bool:
    """Compare against the configured administrator account in constant time."""
    if not username or not password:
        return False
    username_ok = secrets.compare_digest(
        username.encode(), str(settings.ADMIN_USERNAME).encode()
    )
    password_ok = secrets.compare_digest(
        password.encode(), str(settings.ADMIN_PASSWORD).encode()
    )
    return username_ok and password_ok


def issue_admin_token() -> str:
    """Token for the single configured administrator."""
    return create_access_token(
        data={"sub": ADMIN_ROLE, "id": ADMIN_ROLE, "role": ADMIN_ROLE}
    )
