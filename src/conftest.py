"""
Shared fixtures: a fake marketplace server on top of httpx.MockTransport.
"""

import asyncio
import typing as t

import httpx
import pytest
import pytest_asyncio

from marketplace.accounts.schema import User
from marketplace.api.client import APIClient

BASE_URL = "https://api.test/api/v1"
API_PREFIX = "/api/v1"

Responder = httpx.Response | t.Callable[[httpx.Request], t.Any]


def envelope(
    data: t.Any = None,
    *,
    status_code: int = 200,
    message: str | None = None,
    success: bool | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Build a response in the API's `{success, message, data}` envelope."""
    body: dict[str, t.Any] = {"success": success if success is not None else status_code < 400}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return httpx.Response(status_code, json=body, headers=headers)


def unauthorized(message: str = "Not authenticated") -> httpx.Response:
    return envelope(status_code=401, message=message)


def user_payload(**overrides: t.Any) -> dict[str, t.Any]:
    payload = {
        "id": "user-1",
        "email": "jane@example.com",
        "firstName": "Jane",
        "lastName": "Doe",
        "role": "CUSTOMER",
    }
    payload.update(overrides)
    return payload


class FakeAPI:
    """Routes requests by (method, path) and records everything it receives.

    Each route holds a list of responders consumed in order; the last one keeps
    answering. A responder is a response or a callable taking the request
    (sync or async) and returning one.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], list[Responder]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, *responders: Responder) -> None:
        self.routes[(method.upper(), path)] = list(responders)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method.upper() and self._path(r) == path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, self._path(request))
        responders = self.routes.get(key)
        if not responders:
            return envelope(status_code=404, message=f"No route for {key[0]} {key[1]}")
        responder = responders.pop(0) if len(responders) > 1 else responders[0]
        if isinstance(responder, httpx.Response):
            # Responses are single-use; hand out a copy so the last one can repeat.
            return httpx.Response(responder.status_code, headers=responder.headers, content=responder.content)
        result = responder(request)
        if asyncio.iscoroutine(result):
            result = await result
        return t.cast(httpx.Response, result)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @staticmethod
    def _path(request: httpx.Request) -> str:
        path = request.url.path
        return path[len(API_PREFIX) :] if path.startswith(API_PREFIX) else path


@pytest.fixture
def fake_api() -> FakeAPI:
    """A fake server with no routes."""
    return FakeAPI()


@pytest_asyncio.fixture
async def api_client(fake_api: FakeAPI) -> t.AsyncIterator[APIClient]:
    """An APIClient talking to `fake_api`."""
    client = APIClient(BASE_URL, transport=fake_api.transport)
    yield client
    await client.aclose()


@pytest.fixture
def user() -> User:
    """A logged-in customer."""
    return User.model_validate(user_payload())


@pytest.fixture
def seller() -> User:
    """A logged-in seller."""
    return User.model_validate(user_payload(id="seller-1", email="shop@example.com", role="SELLER"))
