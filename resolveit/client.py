"""Async HTTP client for the ResolveIt API.

Administrator calls take an explicit AdminSession instead of reading a
token from shared state, so several sessions can coexist in one process.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
from jose import JWTError, jwt

from resolveit.core.logging import log

# Used only when the issued token carries no readable exp claim
DEFAULT_TOKEN_LIFETIME = timedelta(hours=24)


class ClientError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str, details: dict | None = None):
        self.status_code = status_code
        self.message = message
        self.details = details or {}
        super().__init__(f"{status_code}: {message}")


def token_expiry(token: str) -> datetime:
    """Expiry from the token's own exp claim; the signature is the server's concern."""
    try:
        exp = jwt.get_unverified_claims(token).get("exp")
    except JWTError as e:
        log.warning(f"Could not read admin token claims: {e}")
        exp = None
    if exp is None:
        return datetime.now(timezone.utc) + DEFAULT_TOKEN_LIFETIME
    return datetime.fromtimestamp(exp, tz=timezone.utc)


@dataclass(frozen=True)
class AdminSession:
    """Bearer credential obtained from admin login."""
    token: str
    expires_at: datetime

    @property
    def expired(self) -> bool:
        return datetime.now(timezone.utc) >= self.expires_at

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


class ResolveItClient:
    """Thin wrapper over the public and admin endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        api_prefix: str = "/api",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + api_prefix,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "ResolveItClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        session: AdminSession | None = None,
        **kwargs: Any,
    ) -> Any:
        if session is not None:
            if session.expired:
                raise ClientError(401, "Admin session expired, log in again")
            kwargs["headers"] = {**kwargs.get("headers", {}), **session.headers}

        response = await self._http.request(method, path, **kwargs)
        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("error") or response.reason_phrase
        log.debug(f"{method} {path} failed: {response.status_code} {message}")
        raise ClientError(response.status_code, message, body.get("details"))

    # ─── Public ──────────────────────────────────────

    async def login(self, username: str, password: str) -> AdminSession:
        data = await self._request(
            "POST", "/admin-login", json={"username": username, "password": password}
        )
        token = data["token"]
        return AdminSession(token=token, expires_at=token_expiry(token))

    async def register_user(self, user: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("POST", "/register-user", json=user))["user"]

    async def register_case(self, case: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/register-case", json=case)

    async def get_case(self, case_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/case/{case_id}")

    async def respond(self, case_id: str, accepted: bool, reason: str | None = None) -> dict[str, Any]:
        data = await self._request(
            "POST",
            f"/case/{case_id}/opposite-party-response",
            json={"accepted": accepted, "reason": reason},
        )
        return data["case"]

    async def stats(self) -> dict[str, Any]:
        return await self._request("GET", "/dashboard/stats")

    # ─── Admin ───────────────────────────────────────

    async def list_cases(
        self,
        session: AdminSession,
        status: str | None = None,
        case_type: str | None = None,
    ) -> list[dict[str, Any]]:
        params = {k: v for k, v in {"status": status, "caseType": case_type}.items() if v}
        return await self._request("GET", "/cases", session, params=params)

    async def form_panel(
        self, session: AdminSession, case_id: str, panel: list[dict[str, Any]]
    ) -> dict[str, Any]:
        data = await self._request(
            "PATCH", f"/case/{case_id}/panel", session, json={"panel": panel}
        )
        return data["case"]

    async def nominate_witnesses(
        self, session: AdminSession, case_id: str, witnesses: list[dict[str, Any]]
    ) -> dict[str, Any]:
        data = await self._request(
            "PATCH", f"/case/{case_id}/witnesses", session, json={"witnesses": witnesses}
        )
        return data["case"]

    async def schedule_mediation(
        self,
        session: AdminSession,
        case_id: str,
        scheduled_at: datetime,
        attendees: list[str] | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        data = await self._request(
            "POST",
            f"/case/{case_id}/schedule-mediation",
            session,
            json={
                "scheduledAt": scheduled_at.isoformat(),
                "attendees": attendees or [],
                "notes": notes,
            },
        )
        return data["case"]

    async def resolve(
        self,
        session: AdminSession,
        case_id: str,
        agreement: str,
        satisfaction_level: int | None = None,
    ) -> dict[str, Any]:
        data = await self._request(
            "POST",
            f"/case/{case_id}/resolve",
            session,
            json={"agreement": agreement, "satisfactionLevel": satisfaction_level},
        )
        return data["case"]

    async def set_status(self, session: AdminSession, case_id: str, status: str) -> dict[str, Any]:
        data = await self._request(
            "PATCH", f"/case/{case_id}/workflow-status", session, json={"status": status}
        )
        return data["case"]
