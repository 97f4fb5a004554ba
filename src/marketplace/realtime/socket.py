"""Socket.IO connection for live booking and campaign updates."""

import typing as t
from enum import StrEnum

import socketio
import structlog

from marketplace.conf import settings

logger = structlog.get_logger(__name__)

Listener = t.Callable[[t.Any], t.Awaitable[None] | None]


class RealtimeEvent(StrEnum):
    BOOKING_UPDATED = "booking:updated"
    BOOKING_NEW = "booking:new"
    CAMPAIGN_UPDATED = "campaign:updated"


JOIN_CAMPAIGN = "join:campaign"
LEAVE_CAMPAIGN = "leave:campaign"


class RealtimeClient:
    """A single Socket.IO connection with any number of listeners per event.

    python-socketio keeps one handler per event, so the client registers its
    own dispatcher once per event and fans out to the listeners added with
    `on`. Listeners may be plain functions or coroutine functions.
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        reconnection_attempts: int = 5,
        reconnection_delay: float = 1,
        sio: socketio.AsyncClient | None = None,
    ) -> None:
        """Initialize the realtime client.

        Args:
            url: Socket.IO server URL. Defaults to settings.SOCKET_URL.
            reconnection_attempts: Reconnection attempts after a dropped connection.
            reconnection_delay: Seconds before the first reconnection attempt.
            sio: Pre-built Socket.IO client (used by tests).
        """
        self.url = url or settings.SOCKET_URL
        self.sio = sio or socketio.AsyncClient(
            reconnection=True,
            reconnection_attempts=reconnection_attempts,
            reconnection_delay=reconnection_delay,
        )
        self._listeners: dict[str, list[Listener]] = {event.value: [] for event in RealtimeEvent}

        self.sio.on("connect", self._on_connect)
        self.sio.on("disconnect", self._on_disconnect)
        self.sio.on("connect_error", self._on_connect_error)
        for event in RealtimeEvent:
            self.sio.on(event.value, self._make_dispatcher(event.value))

    @property
    def connected(self) -> bool:
        return bool(self.sio.connected)

    async def connect(self, token: str) -> None:
        """Connect with `token` as the auth payload; a no-op while already connected."""
        if self.connected:
            return
        await self.sio.connect(self.url, auth={"token": token}, transports=["websocket", "polling"])

    async def disconnect(self) -> None:
        if self.connected:
            await self.sio.disconnect()

    def on(self, event: RealtimeEvent, listener: Listener) -> None:
        self._listeners[event.value].append(listener)

    def off(self, event: RealtimeEvent, listener: Listener) -> None:
        try:
            self._listeners[event.value].remove(listener)
        except ValueError:
            pass

    def on_booking_update(self, listener: Listener) -> None:
        self.on(RealtimeEvent.BOOKING_UPDATED, listener)

    def on_new_booking(self, listener: Listener) -> None:
        self.on(RealtimeEvent.BOOKING_NEW, listener)

    def on_campaign_update(self, listener: Listener) -> None:
        self.on(RealtimeEvent.CAMPAIGN_UPDATED, listener)

    def off_booking_update(self, listener: Listener) -> None:
        self.off(RealtimeEvent.BOOKING_UPDATED, listener)

    def off_new_booking(self, listener: Listener) -> None:
        self.off(RealtimeEvent.BOOKING_NEW, listener)

    def off_campaign_update(self, listener: Listener) -> None:
        self.off(RealtimeEvent.CAMPAIGN_UPDATED, listener)

    async def join_campaign(self, campaign_id: str) -> None:
        """Receive updates for one campaign (sellers watching their sales)."""
        if self.connected:
            await self.sio.emit(JOIN_CAMPAIGN, campaign_id)

    async def leave_campaign(self, campaign_id: str) -> None:
        if self.connected:
            await self.sio.emit(LEAVE_CAMPAIGN, campaign_id)

    async def dispatch(self, event: str, data: t.Any) -> None:
        """Deliver `data` to every listener of `event`."""
        for listener in list(self._listeners.get(event, [])):
            result = listener(data)
            if result is not None:
                await result

    def _make_dispatcher(self, event: str) -> t.Callable[[t.Any], t.Awaitable[None]]:
        async def handler(data: t.Any = None) -> None:
            await self.dispatch(event, data)

        return handler

    async def _on_connect(self) -> None:
        logger.info("socket_connected", sid=self.sio.sid)

    async def _on_disconnect(self, reason: t.Any = None) -> None:
        logger.info("socket_disconnected", reason=reason)

    async def _on_connect_error(self, data: t.Any = None) -> None:
        logger.error("socket_connection_error", error=data)
