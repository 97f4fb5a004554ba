"""Keeps the server session alive while a user is logged in.

The server session lasts `session_expiry` seconds. The manager refreshes it
on a timer, `refresh_buffer` seconds before it would lapse. Failed refreshes
are retried a few times with a fixed delay; after that the manager waits for
the next tick (or for a 401, which ends the session). Callers forward
visibility and connectivity changes through `on_visible` and `on_online`.
"""

import asyncio
import typing as t
from datetime import UTC, datetime

import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt, wait_fixed

from marketplace.accounts.api import AuthAPI
from marketplace.accounts.schema import User
from marketplace.common.exceptions import APIError
from marketplace.conf import settings

from . import keys
from .cache import QueryCache
from .store import AuthStore

logger = structlog.get_logger(__name__)

SessionExpiredHook = t.Callable[[str], None]


def _is_retryable(exc: BaseException) -> bool:
    return not (isinstance(exc, APIError) and exc.is_unauthorized)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.info(
        "session_refresh_retry_scheduled",
        attempt=retry_state.attempt_number,
        delay=retry_state.next_action.sleep if retry_state.next_action else None,
    )


class SessionManager:
    """Verifies, refreshes and expires the session of the user held in an `AuthStore`."""

    def __init__(
        self,
        auth: AuthAPI,
        store: AuthStore,
        cache: QueryCache,
        *,
        session_expiry: float | None = None,
        refresh_buffer: float | None = None,
        max_refresh_attempts: int | None = None,
        retry_delay: float | None = None,
        on_session_expired: SessionExpiredHook | None = None,
        session_expired_route: str | None = None,
    ) -> None:
        """Initialize the session manager.

        Args:
            auth: Auth endpoints used to verify and refresh.
            store: Holds the logged-in user.
            cache: Query cache; the profile is cached on every verify/refresh.
            session_expiry: Server session lifetime in seconds.
            refresh_buffer: How long before expiry the scheduled refresh runs.
            max_refresh_attempts: Attempts per refresh before giving up until the next tick.
            retry_delay: Seconds between attempts.
            on_session_expired: Called with the login route when the session ends.
            session_expired_route: Route handed to `on_session_expired`.
        """
        self.auth = auth
        self.store = store
        self.cache = cache
        self.session_expiry = settings.SESSION_EXPIRY if session_expiry is None else session_expiry
        self.refresh_buffer = settings.REFRESH_BUFFER if refresh_buffer is None else refresh_buffer
        self.max_refresh_attempts = max_refresh_attempts or settings.MAX_REFRESH_ATTEMPTS
        self.retry_delay = settings.REFRESH_RETRY_DELAY if retry_delay is None else retry_delay
        self.on_session_expired = on_session_expired
        self.session_expired_route = session_expired_route or settings.SESSION_EXPIRED_ROUTE

        self.last_refresh_at: datetime | None = None
        self._initialized = False
        self._user_id: str | None = None
        self._refreshing = False
        self._expired = False
        self._timer: asyncio.Task[None] | None = None

    @property
    def refresh_interval(self) -> float:
        return self.session_expiry - self.refresh_buffer

    @property
    def is_active(self) -> bool:
        return self._initialized and self._timer is not None and not self._timer.done()

    async def start(self, user: User | None = None) -> bool:
        """Begin managing the session of `user` (default: the store's user).

        Does nothing if that user is already managed. With no user, tears down
        whatever was running.

        Returns:
            Whether a session is being managed afterwards.
        """
        if user is not None and (self.store.user is None or self.store.user.id != user.id):
            self.store.set_user(user)
        current = self.store.user
        user_id = current.id if current else None

        if self._initialized and self._user_id == user_id:
            return True

        if user_id is None:
            if self._initialized:
                logger.info("session_user_logged_out")
                self.stop()
            self.store.set_loading(False)
            return False

        if self._initialized:
            self.stop()

        logger.info("session_initializing", user_id=user_id)
        self._expired = False
        if not await self.verify():
            logger.info("session_initial_verification_failed", user_id=user_id)
            self.store.set_loading(False)
            return False

        self._initialized = True
        self._user_id = user_id
        self.last_refresh_at = datetime.now(UTC)
        self._timer = asyncio.create_task(self._run_timer())
        logger.info("session_auto_refresh_started", user_id=user_id, interval=self.refresh_interval)
        self.store.set_loading(False)
        return True

    def stop(self) -> None:
        """Cancel the refresh timer (and any retry running on it)."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.info("session_refresh_timer_cleared")
        self._initialized = False
        self._user_id = None

    async def verify(self) -> bool:
        """Check the session against `/auth/profile`.

        Returns:
            False if there is no user or the server rejected the session.
            True otherwise, including when the server could not be reached.
        """
        if self.store.user is None:
            return False

        try:
            user = await self.auth.get_profile()
        except APIError as e:
            if e.is_unauthorized:
                self.expire()
                return False
            logger.warning("session_verification_failed_assuming_valid", status=e.status_code, error=e.message)
            return True

        self.store.set_user(user)
        self.cache.set(keys.AUTH_PROFILE, user)
        logger.info("session_verified", user_id=user.id)
        return True

    async def refresh(self) -> bool:
        """Renew the session.

        Skipped while another refresh runs or when nobody is logged in.
        A 401 ends the session; other failures are retried up to
        `max_refresh_attempts` times and then dropped until the next tick.

        Returns:
            Whether the session was renewed.
        """
        if self._refreshing:
            logger.info("session_refresh_already_in_progress")
            return False
        if self.store.user is None:
            logger.info("session_refresh_skipped_no_user")
            return False

        self._refreshing = True
        try:
            retrying = AsyncRetrying(
                stop=stop_after_attempt(self.max_refresh_attempts),
                wait=wait_fixed(self.retry_delay),
                retry=retry_if_exception(_is_retryable),
                before_sleep=_log_retry,
                reraise=True,
            )
            payload = await retrying(self.auth.refresh_token)
        except APIError as e:
            if e.is_unauthorized:
                self.expire()
            else:
                logger.error("session_refresh_attempts_exhausted", attempts=self.max_refresh_attempts, error=e.message)
            return False
        finally:
            self._refreshing = False

        if payload is None:
            logger.info("session_refresh_not_renewed")
            return False

        self.store.set_user(payload.user)
        self.cache.set(keys.AUTH_PROFILE, payload.user)
        self.last_refresh_at = datetime.now(UTC)
        logger.info("session_refreshed", user_id=payload.user.id)
        return True

    async def on_visible(self) -> bool:
        """The app came back to the foreground: refresh if half the session lifetime has passed."""
        if self.store.user is None:
            return False
        if self.last_refresh_at is not None:
            elapsed = (datetime.now(UTC) - self.last_refresh_at).total_seconds()
            if elapsed <= self.session_expiry / 2:
                return False
        logger.info("session_refresh_after_absence")
        return await self.refresh()

    async def on_online(self) -> bool:
        """Connectivity came back: re-verify the session."""
        if self.store.user is None:
            return False
        logger.info("session_connection_restored")
        return await self.verify()

    def expire(self) -> None:
        """End the session locally and notify the owner (once per session)."""
        if self._expired:
            return
        self._expired = True
        logger.info("session_expired", redirect_to=self.session_expired_route)
        self.store.logout()
        self.cache.clear()
        self.stop()
        if self.on_session_expired is not None:
            self.on_session_expired(self.session_expired_route)

    async def _run_timer(self) -> None:
        while True:
            await asyncio.sleep(self.refresh_interval)
            logger.info("session_scheduled_refresh")
            try:
                await self.refresh()
            except Exception:
                logger.exception("session_scheduled_refresh_crashed")
