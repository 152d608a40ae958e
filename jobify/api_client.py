"""
Jobify API Client - typed endpoint methods for the job-tracker backend.

All paths are relative to the versioned API root held by the transport.
Auth endpoints return the session in response *headers*: `user` as a
JSON-encoded string and `token` raw.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from .config import Settings, get_settings
from .errors import AuthHeaderError
from .models.schemas import (
    Credentials,
    JobDraft,
    JobsPage,
    ProfileUpdate,
    SessionPayload,
    StatsPayload,
    User,
)
from .transport import AuthTransport, TokenGetter, UnauthorizedCallback
from .utils.logger import get_logger

logger = get_logger(__name__)

AUTH_ENDPOINTS = ("register", "login")
ALL_FILTER = "all"


@dataclass(frozen=True)
class JobsQuery:
    """Query string for GET /jobs."""

    page: int = 1
    status: str = ALL_FILTER
    job_type: str = ALL_FILTER
    sort: str = "latest"
    search: str = ""
    limit: int = 10

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "limit": self.limit,
            "page": self.page,
            "status": self.status,
            "jobType": self.job_type,
            "sort": self.sort,
        }
        if self.search:
            params["search"] = self.search
        return params


class JobifyClient:
    """
    Client for the Jobify backend.

    Provides methods to:
    - Register / log in (public)
    - Update and fetch the current user
    - List, create, edit and delete jobs
    - Fetch application statistics
    """

    def __init__(self, transport: AuthTransport):
        self.transport = transport

    @staticmethod
    def _parse_session(response: httpx.Response) -> SessionPayload:
        """Read the user/token pair from the auth response headers."""
        raw_user = response.headers.get("user")
        token = response.headers.get("token")
        if not raw_user or not token:
            raise AuthHeaderError("The server did not return a session.")
        try:
            user = User.model_validate_json(raw_user)
        except ValidationError as exc:
            raise AuthHeaderError("The server returned a malformed user.") from exc
        return SessionPayload(user=user, token=token, location=user.location)

    async def authenticate(self, endpoint: str, credentials: Credentials) -> SessionPayload:
        """
        Register or log in through the public path.

        Args:
            endpoint: "register" or "login"
            credentials: Body for the call

        Returns:
            The new session
        """
        if endpoint not in AUTH_ENDPOINTS:
            raise ValueError(f"Unknown auth endpoint: {endpoint!r}")
        response = await self.transport.public_request(
            "POST", endpoint, json=credentials.to_body()
        )
        session = self._parse_session(response)
        logger.info("🔐 %s succeeded for user %s", endpoint, session.user.id)
        return session

    async def register(self, credentials: Credentials) -> SessionPayload:
        return await self.authenticate("register", credentials)

    async def login(self, credentials: Credentials) -> SessionPayload:
        return await self.authenticate("login", credentials)

    async def update_user(self, profile: ProfileUpdate) -> SessionPayload:
        """PATCH /updateUser; returns the refreshed session."""
        response = await self.transport.request("PATCH", "updateUser", json=profile.to_body())
        return self._parse_session(response)

    async def get_current_user(self) -> User:
        """GET /user. The user may come back in the header or in the body."""
        response = await self.transport.request("GET", "user")
        raw_user = response.headers.get("user")
        if raw_user:
            return User.model_validate_json(raw_user)
        try:
            body = response.json()
        except ValueError as exc:
            raise AuthHeaderError("The server returned a malformed user.") from exc
        if isinstance(body, dict) and isinstance(body.get("user"), dict):
            body = body["user"]
        return User.model_validate(body)

    async def list_jobs(self, query: JobsQuery) -> JobsPage:
        response = await self.transport.request("GET", "jobs", params=query.to_params())
        return JobsPage.model_validate_json(response.content)

    async def create_job(self, draft: JobDraft) -> None:
        await self.transport.request("POST", "jobs", json=draft.to_body())

    async def update_job(self, job_id: str, draft: JobDraft) -> None:
        await self.transport.request("PATCH", f"jobs/{job_id}", json=draft.to_body())

    async def delete_job(self, job_id: str) -> None:
        await self.transport.request("DELETE", f"jobs/{job_id}")

    async def get_stats(self) -> StatsPayload:
        response = await self.transport.request("GET", "jobs/stats")
        return StatsPayload.model_validate_json(response.content)


def get_client(
    token_getter: TokenGetter,
    on_unauthorized: UnauthorizedCallback,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> JobifyClient:
    """
    Convenience function to build a client from settings.

    Args:
        token_getter: Returns the current session token
        on_unauthorized: Forced-logout callback
        settings: Settings to use (read from the environment if omitted)
        transport: Optional httpx transport (tests pass httpx.MockTransport)

    Returns:
        JobifyClient over a fresh AuthTransport
    """
    settings = settings or get_settings()
    return JobifyClient(
        AuthTransport(
            settings.api_base_url,
            token_getter=token_getter,
            on_unauthorized=on_unauthorized,
            timeout=settings.request_timeout,
            transport=transport,
        )
    )
