"""Booking endpoints for customers and sellers."""

import typing as t

from marketplace.api.base import BaseAPI
from marketplace.common.schema import query_params

from .schema import Booking, BookingFilters, BookingList, CampaignBookingStats, CreateBookingData


class BookingsAPI(BaseAPI):
    """Wraps the `/bookings` endpoints."""

    async def create_booking(self, booking_data: CreateBookingData) -> Booking:
        """Reserve tickets; the booking stays PENDING until it is paid."""
        data = await self._post_data("/bookings", booking_data.to_payload())
        return Booking.model_validate(data["booking"])

    async def get_my_bookings(self, filters: BookingFilters | None = None) -> BookingList:
        data = await self._get_data("/bookings/my-bookings", params=query_params(filters))
        return BookingList.model_validate(data)

    async def get_booking(self, booking_id: str) -> Booking:
        data = await self._get_data(f"/bookings/{booking_id}")
        return Booking.model_validate(data["booking"])

    async def cancel_booking(self, booking_id: str, reason: str | None = None) -> dict[str, t.Any]:
        """Cancel a booking.

        Returns:
            The response envelope.
        """
        return t.cast(dict[str, t.Any], await self.client.post(f"/bookings/{booking_id}/cancel", {"reason": reason}))

    # Seller only

    async def get_by_campaign(self, campaign_id: str) -> list[Booking]:
        data = await self._get_data(f"/bookings/campaign/{campaign_id}")
        return [Booking.model_validate(item) for item in data["bookings"]]

    async def get_campaign_stats(self, campaign_id: str) -> CampaignBookingStats:
        return t.cast(CampaignBookingStats, await self._get_data(f"/bookings/campaign/{campaign_id}/stats"))
