"""Authentication, seller onboarding and seller manager endpoints."""

import typing as t

import structlog

from marketplace.api.base import BaseAPI
from marketplace.common.exceptions import APIError

from .schema import (
    ApplicationStatusResponse,
    AuthPayload,
    CreateManagerData,
    CreateManagerResponse,
    DeactivateManagerResponse,
    LoginCredentials,
    ManagerListResponse,
    NewSellerApplicationData,
    RegisterData,
    SellerApplicationData,
    SellerApplicationResult,
    User,
)

logger = structlog.get_logger(__name__)


class AuthAPI(BaseAPI):
    """Wraps the `/auth` endpoints."""

    async def login(self, credentials: LoginCredentials) -> AuthPayload:
        """Open a session; the server sets the session cookie.

        Args:
            credentials: Email, password and the optional remember-me flag.

        Returns:
            The logged-in user.
        """
        try:
            data = await self._post_data("/auth/login", credentials.to_payload())
        except APIError as e:
            logger.warning("login_failed", status=e.status_code, error=e.message)
            raise
        return AuthPayload.model_validate(data)

    async def register(self, user_data: RegisterData) -> AuthPayload:
        """Create a customer account. The role is always sent as CUSTOMER."""
        payload = {**user_data.to_payload(), "role": "CUSTOMER"}
        try:
            data = await self._post_data("/auth/register", payload)
        except APIError as e:
            logger.warning("registration_failed", status=e.status_code, error=e.message)
            raise
        return AuthPayload.model_validate(data)

    def google_auth_url(self) -> str:
        """URL to redirect the browser to for Google sign-in."""
        return f"{self.client.base_url}/auth/google"

    async def logout(self) -> dict[str, t.Any]:
        """Close the session.

        Never raises: local state must be cleared even when the call fails.

        Returns:
            The response envelope, or a failed envelope if the call failed.
        """
        try:
            envelope = await self.client.post("/auth/logout")
        except APIError as e:
            logger.warning("logout_failed", status=e.status_code, error=e.message)
            return {"success": False, "message": "Logout failed"}
        return envelope or {"success": True}

    async def refresh_token(self) -> AuthPayload | None:
        """Renew the session cookie.

        Returns:
            The current user, or None if the server renewed without returning one.
        """
        try:
            data = await self._post_data("/auth/refresh-token")
        except APIError as e:
            logger.warning("token_refresh_failed", status=e.status_code, error=e.message)
            raise
        if not isinstance(data, dict) or not data.get("user"):
            logger.warning("token_refresh_without_user")
            return None
        return AuthPayload.model_validate(data)

    async def get_profile(self) -> User:
        """Fetch the user behind the current session."""
        data = await self._get_data("/auth/profile")
        return AuthPayload.model_validate(data).user

    async def apply_seller_new(self, application: NewSellerApplicationData) -> SellerApplicationResult:
        """Register a new account and apply for a seller account in one step."""
        data = await self._post_data("/auth/apply-seller", application.to_payload())
        return SellerApplicationResult.model_validate(data)

    async def apply_seller_existing(self, application: SellerApplicationData) -> ApplicationStatusResponse:
        """Apply for a seller account as the logged-in user."""
        data = await self._post_data("/auth/seller-application", application.to_payload())
        return ApplicationStatusResponse.model_validate(data)

    async def get_application_status(self) -> ApplicationStatusResponse:
        data = await self._get_data("/auth/application-status")
        return ApplicationStatusResponse.model_validate(data)

    # Manager management

    async def create_manager(self, manager_data: CreateManagerData) -> CreateManagerResponse:
        """Invite a manager to the seller's team."""
        data = await self._post_data("/auth/create-manager", manager_data.to_payload())
        return CreateManagerResponse.model_validate(data)

    async def get_seller_managers(self) -> ManagerListResponse:
        data = await self._get_data("/auth/seller-managers")
        return ManagerListResponse.model_validate(data)

    async def deactivate_manager(self, manager_id: str) -> DeactivateManagerResponse:
        data = await self._post_data(f"/auth/deactivate-manager/{manager_id}")
        return DeactivateManagerResponse.model_validate(data)
