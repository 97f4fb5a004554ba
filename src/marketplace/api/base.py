"""Shared plumbing for the resource APIs."""

import typing as t

from marketplace.common.exceptions import APIError

from .client import APIClient


def unwrap(envelope: t.Any) -> t.Any:
    """Return the `data` member of a response envelope.

    Raises:
        APIError: If the envelope reports `success: false` on a 2xx response.
    """
    if not isinstance(envelope, dict):
        return envelope
    if envelope.get("success") is False:
        raise APIError(
            envelope.get("message") or "Request was not successful",
            data=envelope,
            errors=envelope.get("errors"),
        )
    return envelope.get("data")


class BaseAPI:
    """A group of endpoints sharing one `APIClient`."""

    def __init__(self, client: APIClient) -> None:
        self.client = client

    async def _get_data(self, path: str, params: dict[str, t.Any] | None = None) -> t.Any:
        return unwrap(await self.client.get(path, params=params))

    async def _post_data(self, path: str, json: t.Any = None) -> t.Any:
        return unwrap(await self.client.post(path, json=json))
