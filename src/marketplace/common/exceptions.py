"""Errors raised by the marketplace client."""

import typing as t


class APIError(Exception):
    """Raised when the API answers with a non-2xx status.

    Attributes:
        status_code: HTTP status code, if a response was received.
        data: The decoded response body, if any.
        errors: Field errors from the response envelope.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        data: t.Any = None,
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            message: Error message from the envelope, or a generic fallback.
            status_code: HTTP status code, if a response was received.
            data: The decoded response body, if any.
            errors: Field errors from the response envelope.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.data = data
        self.errors = errors or []

    @property
    def is_unauthorized(self) -> bool:
        """Whether the server rejected the session."""
        return self.status_code == 401

    @property
    def is_client_error(self) -> bool:
        """Whether the status is a 4xx."""
        return self.status_code is not None and 400 <= self.status_code < 500

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code!r}, message={self.message!r})"


class NetworkError(APIError):
    """Raised when no response was received (connection error, timeout)."""


class SessionExpiredError(APIError):
    """Raised when the session could not be refreshed and has been cleared locally.

    Attributes:
        redirect_to: The login route the caller should send the user to.
    """

    def __init__(self, message: str = "Session expired", redirect_to: str = "/login?session_expired=true") -> None:
        """Initialize the error."""
        super().__init__(message, status_code=401)
        self.redirect_to = redirect_to
