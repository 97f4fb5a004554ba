"""HTTP transport for the marketplace API."""

from .base import BaseAPI, unwrap
from .client import APIClient, RefreshState, is_auth_endpoint

__all__ = ["APIClient", "BaseAPI", "RefreshState", "is_auth_endpoint", "unwrap"]
