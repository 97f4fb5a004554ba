"""Configuration for the marketplace client.

Values are read from the environment (or a `.env` file in the working
directory) through python-decouple. Every component also accepts explicit
arguments, falling back to these settings when they are omitted.
"""

from decouple import config

VERSION = "1.4.0"


class Settings:
    """Client configuration."""

    # API endpoints
    API_URL: str = config("MARKETPLACE_API_URL", default="https://ticketing-marketplace.onrender.com/api/v1")
    SOCKET_URL: str = config("MARKETPLACE_SOCKET_URL", default="http://localhost:5000")

    # Request timeouts (seconds)
    REQUEST_TIMEOUT: float = config("MARKETPLACE_REQUEST_TIMEOUT", default=30, cast=float)

    # Session lifetime and refresh cadence (seconds)
    SESSION_EXPIRY: float = config("MARKETPLACE_SESSION_EXPIRY", default=15 * 60, cast=float)
    REFRESH_BUFFER: float = config("MARKETPLACE_REFRESH_BUFFER", default=2 * 60, cast=float)
    MAX_REFRESH_ATTEMPTS: int = config("MARKETPLACE_MAX_REFRESH_ATTEMPTS", default=3, cast=int)
    REFRESH_RETRY_DELAY: float = config("MARKETPLACE_REFRESH_RETRY_DELAY", default=5, cast=float)

    # Query cache (seconds)
    QUERY_STALE_TIME: float = config("MARKETPLACE_QUERY_STALE_TIME", default=5 * 60, cast=float)

    # Cookie carrying the server-side session
    SESSION_COOKIE_NAME: str = config("MARKETPLACE_SESSION_COOKIE", default="sessionId")

    # Persisted auth state ("auth-storage"); empty keeps it in memory only
    AUTH_STORAGE_PATH: str = config("MARKETPLACE_AUTH_STORAGE_PATH", default="")

    DEFAULT_CURRENCY: str = config("MARKETPLACE_DEFAULT_CURRENCY", default="UGX")

    # Login route used when the session can no longer be refreshed
    LOGIN_ROUTE: str = "/login"
    SESSION_EXPIRED_ROUTE: str = "/login?session_expired=true"

    # Logging
    LOG_JSON: bool = config("MARKETPLACE_LOG_JSON", default=False, cast=bool)
    LOG_LEVEL: str = config("MARKETPLACE_LOG_LEVEL", default="INFO")
    SERVICE_NAME: str = config("SERVICE_NAME", default="marketplace-client")
    DEPLOYMENT_ENVIRONMENT: str = config("DEPLOYMENT_ENVIRONMENT", default="development")

    @property
    def REFRESH_INTERVAL(self) -> float:
        """Seconds between scheduled refreshes: session lifetime minus the safety buffer."""
        return self.SESSION_EXPIRY - self.REFRESH_BUFFER


settings = Settings()
