"""
Authenticated Transport - HTTP client wrapper for the Jobify backend.

Every authenticated request gets `Authorization: Bearer <token>` from the
current session, and every 401 reply triggers the forced-logout callback
before the error reaches the caller. The transport only holds those two
callables, never the store itself.
"""
from typing import Any, Callable, Optional

import httpx

from .utils.logger import get_logger

logger = get_logger(__name__)

TokenGetter = Callable[[], Optional[str]]
UnauthorizedCallback = Callable[[], None]


class AuthTransport:
    """
    Async HTTP transport rooted at the versioned API base URL.

    Provides:
    - request(): authenticated calls (bearer token, 401 -> forced logout)
    - public_request(): unauthenticated calls for register/login
    """

    def __init__(
        self,
        base_url: str,
        token_getter: TokenGetter,
        on_unauthorized: UnauthorizedCallback,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the transport.

        Args:
            base_url: Versioned API root, e.g. http://localhost:5000/api/v1
            token_getter: Returns the current session token (or None)
            on_unauthorized: Forced-logout callback run on any 401 reply
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/") + "/"
        self._token_getter = token_getter
        self._on_unauthorized = on_unauthorized

        headers = {"Accept": "application/json"}
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
            event_hooks={
                "request": [self._attach_token],
                "response": [self._check_response],
            },
        )
        self._public = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
            event_hooks={"response": [self._raise_for_status]},
        )

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self._token_getter()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def _check_response(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        # Read the body so callers can extract the error message
        await response.aread()
        if response.status_code == httpx.codes.UNAUTHORIZED:
            logger.warning(
                "Token rejected (401) on %s %s, forcing logout",
                response.request.method,
                response.request.url.path,
            )
            self._on_unauthorized()
        response.raise_for_status()

    @staticmethod
    async def _raise_for_status(response: httpx.Response) -> None:
        if not response.is_success:
            await response.aread()
            response.raise_for_status()

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Make an authenticated request; raises httpx.HTTPStatusError on non-2xx."""
        return await self._client.request(method, url.lstrip("/"), **kwargs)

    async def public_request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Make an unauthenticated request (no token, no forced logout)."""
        return await self._public.request(method, url.lstrip("/"), **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
        await self._public.aclose()

    async def __aenter__(self) -> "AuthTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
