"""Async client for the ticketing marketplace API."""

from .client import MarketplaceClient
from .common.exceptions import APIError, NetworkError, SessionExpiredError
from .conf import VERSION

__all__ = ["MarketplaceClient", "APIError", "NetworkError", "SessionExpiredError", "VERSION"]
