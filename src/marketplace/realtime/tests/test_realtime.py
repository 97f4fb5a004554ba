import typing as t
from unittest.mock import AsyncMock, MagicMock

import pytest

from marketplace.realtime.bookings import RealtimeBookings
from marketplace.realtime.socket import JOIN_CAMPAIGN, LEAVE_CAMPAIGN, RealtimeClient, RealtimeEvent
from marketplace.session import keys
from marketplace.session.cache import QueryCache


@pytest.fixture
def sio() -> MagicMock:
    """A stand-in for socketio.AsyncClient."""
    sio = MagicMock()
    sio.connected = False
    sio.connect = AsyncMock()
    sio.disconnect = AsyncMock()
    sio.emit = AsyncMock()
    return sio


@pytest.fixture
def realtime(sio: MagicMock) -> RealtimeClient:
    return RealtimeClient("http://socket.test", sio=sio)


class TestRealtimeClient:
    def test_registers_one_handler_per_event(self, sio: MagicMock, realtime: RealtimeClient) -> None:
        registered = [call.args[0] for call in sio.on.call_args_list]

        assert registered == ["connect", "disconnect", "connect_error", *(event.value for event in RealtimeEvent)]

    @pytest.mark.asyncio
    async def test_connect_sends_token(self, sio: MagicMock, realtime: RealtimeClient) -> None:
        await realtime.connect("sess-1")

        sio.connect.assert_awaited_once_with(
            "http://socket.test", auth={"token": "sess-1"}, transports=["websocket", "polling"]
        )

    @pytest.mark.asyncio
    async def test_connect_is_idempotent(self, sio: MagicMock, realtime: RealtimeClient) -> None:
        sio.connected = True

        await realtime.connect("sess-1")

        sio.connect.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rooms_only_when_connected(self, sio: MagicMock, realtime: RealtimeClient) -> None:
        await realtime.join_campaign("c-1")
        sio.emit.assert_not_awaited()

        sio.connected = True
        await realtime.join_campaign("c-1")
        await realtime.leave_campaign("c-1")

        assert [call.args for call in sio.emit.await_args_list] == [(JOIN_CAMPAIGN, "c-1"), (LEAVE_CAMPAIGN, "c-1")]

    @pytest.mark.asyncio
    async def test_dispatch_fans_out_to_listeners(self, realtime: RealtimeClient) -> None:
        received: list[t.Any] = []
        coroutine_listener = AsyncMock()
        realtime.on_booking_update(received.append)
        realtime.on_booking_update(coroutine_listener)

        await realtime.dispatch(RealtimeEvent.BOOKING_UPDATED.value, {"bookingId": "b-1"})

        assert received == [{"bookingId": "b-1"}]
        coroutine_listener.assert_awaited_once_with({"bookingId": "b-1"})

    @pytest.mark.asyncio
    async def test_off_removes_listener(self, realtime: RealtimeClient) -> None:
        listener = MagicMock(return_value=None)
        realtime.on_campaign_update(listener)
        realtime.off_campaign_update(listener)
        realtime.off_campaign_update(listener)

        await realtime.dispatch(RealtimeEvent.CAMPAIGN_UPDATED.value, {"campaignId": "c-1"})

        listener.assert_not_called()


class TestRealtimeBookings:
    @pytest.fixture
    def cache(self) -> QueryCache:
        cache = QueryCache()
        cache.set(keys.bookings_list(), [])
        cache.set(keys.bookings_list({"status": "PENDING"}), [])
        cache.set(keys.bookings_by_campaign("c-1"), [])
        cache.set(keys.booking_detail("b-1"), {})
        cache.set(keys.campaign_detail("c-1"), {})
        cache.set(keys.campaign_detail("c-2"), {})
        return cache

    @pytest.mark.asyncio
    async def test_booking_update(self, realtime: RealtimeClient, cache: QueryCache) -> None:
        notify = MagicMock()
        RealtimeBookings(realtime, cache, notify).attach()

        await realtime.dispatch(
            "booking:updated", {"bookingId": "b-1", "campaignId": "c-1", "bookingReference": "BK-7F3E"}
        )

        assert cache.is_stale(keys.bookings_list())
        assert cache.is_stale(keys.bookings_list({"status": "PENDING"}))
        assert cache.is_stale(keys.bookings_by_campaign("c-1"))
        assert cache.is_stale(keys.booking_detail("b-1"))
        assert not cache.is_stale(keys.campaign_detail("c-1"))
        notify.assert_called_once_with("Booking Updated", "Booking BK-7F3E has been updated")

    @pytest.mark.asyncio
    async def test_new_booking(self, realtime: RealtimeClient, cache: QueryCache) -> None:
        notify = MagicMock()
        RealtimeBookings(realtime, cache, notify).attach()

        await realtime.dispatch("booking:new", {"campaignId": "c-1", "campaignName": "Nyege Nyege"})

        assert cache.is_stale(keys.bookings_list())
        assert cache.is_stale(keys.bookings_by_campaign("c-1"))
        assert cache.is_stale(keys.campaign_detail("c-1"))
        assert not cache.is_stale(keys.campaign_detail("c-2"))
        assert not cache.is_stale(keys.booking_detail("b-1"))
        notify.assert_called_once_with("New Booking", "New booking received for Nyege Nyege")

    @pytest.mark.asyncio
    async def test_detach_stops_handling(self, realtime: RealtimeClient, cache: QueryCache) -> None:
        notify = MagicMock()
        bookings = RealtimeBookings(realtime, cache, notify)
        bookings.attach()
        bookings.attach()
        bookings.detach()

        await realtime.dispatch("booking:new", {"campaignId": "c-1", "campaignName": "Nyege Nyege"})

        notify.assert_not_called()
        assert not cache.is_stale(keys.bookings_list())
