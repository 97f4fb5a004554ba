"""The marketplace client: one object wiring transport, session and resources."""

import typing as t
from pathlib import Path

import httpx
import structlog

from .accounts.api import AuthAPI
from .accounts.guards import LOGIN_ROUTE, guard_route
from .accounts.schema import LoginCredentials, RegisterData, User, UserRole
from .api.client import APIClient
from .bookings.api import BookingsAPI
from .bookings.draft import BookingDraft
from .bookings.schema import Booking
from .campaigns.api import CampaignsAPI
from .common.exceptions import APIError
from .finance.api import FinanceAPI
from .payments.api import PaymentsAPI
from .payments.callback import PaymentCallbackResult, resolve_payment_callback
from .realtime.bookings import Notifier, RealtimeBookings
from .realtime.socket import RealtimeClient
from .session import keys
from .session.cache import QueryCache
from .session.manager import SessionManager
from .session.store import AuthStore

logger = structlog.get_logger(__name__)

SELLER_DASHBOARD = "/seller/dashboard"
CUSTOMER_DASHBOARD = "/customer/dashboard"


def landing_path(user: User) -> str:
    """Dashboard a user lands on after signing in."""
    return SELLER_DASHBOARD if user.role == UserRole.SELLER else CUSTOMER_DASHBOARD


class MarketplaceClient:
    """Customer and seller access to the marketplace.

    Usage:
        async with MarketplaceClient() as client:
            await client.login(LoginCredentials(email=..., password=...))
            campaigns = await client.campaigns.get_featured()
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        storage_path: str | Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_session_expired: t.Callable[[str], None] | None = None,
        notify: Notifier | None = None,
        realtime: RealtimeClient | None = None,
        session_options: dict[str, t.Any] | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: API root. Defaults to settings.API_URL.
            storage_path: Where to persist the logged-in user. Defaults to settings.AUTH_STORAGE_PATH.
            transport: Optional httpx transport (used by tests to fake the server).
            on_session_expired: Called with the login route when the session ends.
            notify: Called with (title, description) for live booking events.
            realtime: Pre-built realtime client. One is created on first use otherwise.
            session_options: Extra keyword arguments for `SessionManager`.
        """
        self.store = AuthStore(storage_path)
        self.cache = QueryCache()
        self.http = APIClient(
            base_url,
            transport=transport,
            on_refreshed=self._on_refreshed,
            on_session_expired=self._on_transport_session_expired,
        )
        self.auth = AuthAPI(self.http)
        self.campaigns = CampaignsAPI(self.http)
        self.bookings = BookingsAPI(self.http)
        self.payments = PaymentsAPI(self.http)
        self.finance = FinanceAPI(self.http)
        self.session = SessionManager(
            self.auth,
            self.store,
            self.cache,
            on_session_expired=on_session_expired,
            **(session_options or {}),
        )
        self.booking_draft = BookingDraft()
        self.notify = notify
        self._realtime = realtime
        self._realtime_bookings: RealtimeBookings | None = None

    @property
    def user(self) -> User | None:
        return self.store.user

    @property
    def is_authenticated(self) -> bool:
        return self.store.is_authenticated

    # Auth flows

    async def restore(self) -> bool:
        """Load the persisted user and resume managing their session."""
        self.store.hydrate()
        return await self.session.start()

    async def login(self, credentials: LoginCredentials) -> str:
        """Sign in and start keeping the session alive.

        Returns:
            The dashboard path for the user's role.
        """
        payload = await self.auth.login(credentials)
        self._sign_in(payload.user)
        await self.session.start(payload.user)
        logger.info("user_logged_in", user_id=payload.user.id, role=payload.user.role)
        return landing_path(payload.user)

    async def register(self, user_data: RegisterData) -> str:
        """Create a customer account and sign in.

        Returns:
            The customer dashboard path.
        """
        payload = await self.auth.register(user_data)
        self._sign_in(payload.user)
        await self.session.start(payload.user)
        logger.info("user_registered", user_id=payload.user.id)
        return CUSTOMER_DASHBOARD

    async def logout(self) -> str:
        """Sign out. Local state is cleared even if the server call fails.

        Returns:
            The login path.
        """
        await self.auth.logout()
        self.session.stop()
        self.store.logout()
        self.cache.clear()
        self.booking_draft.clear()
        await self.disconnect_realtime()
        logger.info("user_logged_out")
        return LOGIN_ROUTE

    def guard(self, path: str) -> str | None:
        """Redirect target for `path` given the current session, or None."""
        return guard_route(path, self.http.session_cookie is not None)

    # Cached queries

    async def get_profile(self) -> User:
        return await self.cache.fetch(keys.AUTH_PROFILE, self.auth.get_profile)

    async def get_booking(self, booking_id: str) -> Booking:
        return await self.cache.fetch(keys.booking_detail(booking_id), lambda: self.bookings.get_booking(booking_id))

    # Booking and payment

    async def submit_booking_draft(self) -> Booking:
        """Create a booking from the current draft and clear it on success."""
        booking = await self.bookings.create_booking(self.booking_draft.to_create_data())
        self.booking_draft.clear()
        self.cache.invalidate(keys.BOOKINGS_ALL)
        self.cache.set(keys.booking_detail(booking.id), booking)
        return booking

    async def handle_payment_callback(self, url_or_query: str | t.Mapping[str, str]) -> PaymentCallbackResult:
        """Verify the payment named in the gateway's redirect."""
        result = await resolve_payment_callback(self.payments, url_or_query)
        if result.succeeded:
            self.cache.invalidate(keys.BOOKINGS_ALL)
            self.cache.invalidate(keys.PAYMENTS_ALL)
        return result

    # Realtime

    @property
    def realtime(self) -> RealtimeClient:
        if self._realtime is None:
            self._realtime = RealtimeClient()
        return self._realtime

    async def connect_realtime(self) -> RealtimeClient:
        """Connect the live-updates socket for the signed-in user.

        Raises:
            APIError: If there is no session to authenticate the socket with.
        """
        token = self.http.session_cookie
        if not self.is_authenticated or token is None:
            raise APIError("Live updates require a signed-in session", status_code=401)
        await self.realtime.connect(token)
        if self._realtime_bookings is None:
            self._realtime_bookings = RealtimeBookings(self.realtime, self.cache, self.notify)
        self._realtime_bookings.attach()
        return self.realtime

    async def disconnect_realtime(self) -> None:
        if self._realtime_bookings is not None:
            self._realtime_bookings.detach()
        if self._realtime is not None:
            await self._realtime.disconnect()

    # Lifecycle

    async def aclose(self) -> None:
        self.session.stop()
        await self.disconnect_realtime()
        await self.http.aclose()

    async def __aenter__(self) -> "MarketplaceClient":
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.aclose()

    def _sign_in(self, user: User) -> None:
        self.store.set_user(user)
        self.cache.set(keys.AUTH_PROFILE, user)

    def _on_refreshed(self, user_payload: dict[str, t.Any]) -> None:
        self.store.set_user(User.model_validate(user_payload))

    def _on_transport_session_expired(self, route: str) -> None:
        self.session.expire()
