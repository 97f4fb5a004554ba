"""Keeps cached booking queries in step with live booking events."""

import typing as t

import structlog

from marketplace.session import keys
from marketplace.session.cache import QueryCache

from .socket import RealtimeClient

logger = structlog.get_logger(__name__)

Notifier = t.Callable[[str, str], None]


class RealtimeBookings:
    """Invalidates booking and campaign queries when the server reports changes.

    `notify(title, description)` is called once per event, for the caller to
    surface however it likes.
    """

    def __init__(self, realtime: RealtimeClient, cache: QueryCache, notify: Notifier | None = None) -> None:
        self.realtime = realtime
        self.cache = cache
        self.notify = notify
        self._attached = False

    def attach(self) -> None:
        if self._attached:
            return
        self.realtime.on_booking_update(self.handle_booking_update)
        self.realtime.on_new_booking(self.handle_new_booking)
        self._attached = True

    def detach(self) -> None:
        if not self._attached:
            return
        self.realtime.off_booking_update(self.handle_booking_update)
        self.realtime.off_new_booking(self.handle_new_booking)
        self._attached = False

    def handle_booking_update(self, data: dict[str, t.Any]) -> None:
        logger.info("booking_updated_event", booking_id=data.get("bookingId"), campaign_id=data.get("campaignId"))
        self.cache.invalidate(keys.bookings_list())
        if campaign_id := data.get("campaignId"):
            self.cache.invalidate(keys.bookings_by_campaign(campaign_id))
        if booking_id := data.get("bookingId"):
            self.cache.invalidate(keys.booking_detail(booking_id))
        self._notify("Booking Updated", f"Booking {data.get('bookingReference')} has been updated")

    def handle_new_booking(self, data: dict[str, t.Any]) -> None:
        logger.info("new_booking_event", campaign_id=data.get("campaignId"))
        self.cache.invalidate(keys.bookings_list())
        if campaign_id := data.get("campaignId"):
            self.cache.invalidate(keys.bookings_by_campaign(campaign_id))
            self.cache.invalidate(keys.campaign_detail(campaign_id))
        self._notify("New Booking", f"New booking received for {data.get('campaignName')}")

    def _notify(self, title: str, description: str) -> None:
        if self.notify is not None:
            self.notify(title, description)
