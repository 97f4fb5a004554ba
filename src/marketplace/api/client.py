"""HTTP client for the marketplace API.

All calls share one cookie jar, so the server-side session (set by login,
renewed by `/auth/refresh-token`) travels with every request.

When a request is rejected with 401, the client refreshes the session once
and replays the request. Concurrent 401s do not each trigger a refresh: the
first one starts it and the others wait on the same in-flight refresh, then
replay. If the refresh itself is rejected, every waiting request fails with
the same `SessionExpiredError` and the session-expired hook is invoked.
"""

import asyncio
import typing as t
from enum import StrEnum

import httpx
import orjson
import structlog

from marketplace.common.exceptions import APIError, NetworkError, SessionExpiredError
from marketplace.conf import settings

logger = structlog.get_logger(__name__)

REFRESH_PATH = "/auth/refresh-token"
LOGIN_PATH = "/auth/login"
AUTH_ENDPOINTS = (REFRESH_PATH, "/auth/logout", LOGIN_PATH, "/auth/register")

DEFAULT_ERROR_MESSAGE = "An error occurred"

RefreshedHook = t.Callable[[dict[str, t.Any]], None]
SessionExpiredHook = t.Callable[[str], None]


class RefreshState(StrEnum):
    IDLE = "idle"
    REFRESHING = "refreshing"


def is_auth_endpoint(path: str) -> bool:
    """Whether a 401 from `path` must not trigger a session refresh."""
    return any(endpoint in path for endpoint in AUTH_ENDPOINTS)


class APIClient:
    """Async client for the marketplace REST API with session refresh on 401."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_refreshed: RefreshedHook | None = None,
        on_session_expired: SessionExpiredHook | None = None,
        session_expired_route: str | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            base_url: API root, e.g. `https://host/api/v1`. Defaults to settings.API_URL.
            timeout: Request timeout in seconds. Defaults to settings.REQUEST_TIMEOUT.
            transport: Optional httpx transport (used by tests to fake the server).
            on_refreshed: Called with the user payload when a refresh returns one.
            on_session_expired: Called with the login route once the session is gone.
            session_expired_route: Route handed to `on_session_expired`.
        """
        self.base_url = (base_url or settings.API_URL).rstrip("/")
        self.on_refreshed = on_refreshed
        self.on_session_expired = on_session_expired
        self.session_expired_route = session_expired_route or settings.SESSION_EXPIRED_ROUTE

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            timeout=httpx.Timeout(timeout or settings.REQUEST_TIMEOUT),
            transport=transport,
        )
        self._refresh_task: asyncio.Task[None] | None = None
        self._waiting = 0

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    @property
    def session_cookie(self) -> str | None:
        """Value of the server session cookie, if one is set."""
        return self._client.cookies.get(settings.SESSION_COOKIE_NAME)

    @property
    def refresh_state(self) -> RefreshState:
        if self._refresh_task is not None and not self._refresh_task.done():
            return RefreshState.REFRESHING
        return RefreshState.IDLE

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, t.Any] | None = None,
        json: t.Any = None,
        _retried: bool = False,
    ) -> t.Any:
        """Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Path relative to the API root (e.g. "/bookings").
            params: Query parameters.
            json: JSON body.

        Returns:
            The decoded response envelope, or None for an empty body.

        Raises:
            APIError: For any non-2xx response that could not be recovered.
            NetworkError: When no response was received.
            SessionExpiredError: When the session could not be refreshed.
        """
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.RequestError as e:
            logger.warning("request_failed", method=method, path=path, error=str(e))
            raise NetworkError(str(e) or DEFAULT_ERROR_MESSAGE) from e

        if response.status_code == 401 and not _retried:
            error = self._to_api_error(response)
            if is_auth_endpoint(path):
                logger.info("auth_endpoint_unauthorized", path=path)
                if LOGIN_PATH not in path:
                    raise self._expire_session(error) from error
                raise error

            await self.refresh_session()
            return await self.request(method, path, params=params, json=json, _retried=True)

        if response.is_error:
            error = self._to_api_error(response)
            logger.info("request_rejected", method=method, path=path, status=response.status_code)
            raise error

        return self._decode(response)

    async def refresh_session(self) -> None:
        """Refresh the session, joining the refresh already in flight if there is one.

        Raises:
            SessionExpiredError: If the server rejected the refresh.
            APIError: If the refresh failed for another reason.
        """
        if self._refresh_task is None or self._refresh_task.done():
            logger.info("session_refresh_started")
            self._refresh_task = asyncio.create_task(self._refresh())
            self._refresh_task.add_done_callback(_consume_exception)
        else:
            logger.info("session_refresh_in_progress_queuing_request", waiting=self._waiting + 1)

        task = self._refresh_task
        self._waiting += 1
        try:
            await asyncio.shield(task)
        finally:
            self._waiting -= 1

    async def _refresh(self) -> None:
        try:
            envelope = await self.request("POST", REFRESH_PATH)
        except SessionExpiredError:
            logger.warning("session_refresh_rejected")
            raise
        except APIError as e:
            logger.warning("session_refresh_failed", status=e.status_code, error=e.message)
            raise

        user = ((envelope or {}).get("data") or {}).get("user")
        if user and self.on_refreshed is not None:
            self.on_refreshed(user)
        logger.info("session_refreshed", user_id=(user or {}).get("id"))

    def _expire_session(self, error: APIError) -> SessionExpiredError:
        """Drop the local session and notify the owner; returns the error to raise."""
        logger.info("session_expired", redirect_to=self.session_expired_route)
        self._client.cookies.clear()
        if self.on_session_expired is not None:
            self.on_session_expired(self.session_expired_route)
        return SessionExpiredError(error.message, redirect_to=self.session_expired_route)

    def _decode(self, response: httpx.Response) -> t.Any:
        if not response.content:
            return None
        try:
            return orjson.loads(response.content)
        except orjson.JSONDecodeError as e:
            raise APIError("Invalid JSON in response", status_code=response.status_code) from e

    def _to_api_error(self, response: httpx.Response) -> APIError:
        try:
            data = orjson.loads(response.content) if response.content else None
        except orjson.JSONDecodeError:
            data = None

        message = None
        errors = None
        if isinstance(data, dict):
            message = data.get("message")
            errors = data.get("errors")
        message = message or f"Request failed with status code {response.status_code}"
        return APIError(message, status_code=response.status_code, data=data, errors=errors)

    async def get(self, path: str, params: dict[str, t.Any] | None = None) -> t.Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: t.Any = None) -> t.Any:
        return await self.request("POST", path, json=json)

    async def put(self, path: str, json: t.Any = None) -> t.Any:
        return await self.request("PUT", path, json=json)

    async def patch(self, path: str, json: t.Any = None) -> t.Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str) -> t.Any:
        return await self.request("DELETE", path)

    async def aclose(self) -> None:
        """Close the HTTP client and release resources."""
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        await self._client.aclose()

    async def __aenter__(self) -> "APIClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Async context manager exit."""
        await self.aclose()


def _consume_exception(task: "asyncio.Task[None]") -> None:
    # Waiters may all have been cancelled; retrieve the outcome so it is not reported as lost.
    if not task.cancelled():
        task.exception()
