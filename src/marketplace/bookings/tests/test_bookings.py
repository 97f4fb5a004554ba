import orjson
import pytest
from pydantic import ValidationError

from conftest import FakeAPI, envelope
from marketplace.api.client import APIClient
from marketplace.bookings.api import BookingsAPI
from marketplace.bookings.draft import BookingDraft
from marketplace.bookings.schema import BookingFilters, BookingStatus, CreateBookingData, IssuanceType

BOOKING = {
    "id": "b-1",
    "bookingRef": "BK-7F3E",
    "status": "PENDING",
    "quantity": 2,
    "ticketType": "VIP",
    "issuanceType": "SEPARATE",
    "totalAmount": 100000,
    "campaign": {"id": "c-1", "title": "Nyege Nyege", "venue": "Itanda Falls"},
    "tickets": [
        {"id": "t-1", "ticketNumber": "TKT-1", "qrCode": "qr-1", "bookingId": "b-1"},
        {"id": "t-2", "ticketNumber": "TKT-2", "qrCode": "qr-2", "bookingId": "b-1", "status": "USED"},
    ],
}


@pytest.fixture
def bookings_api(api_client: APIClient) -> BookingsAPI:
    return BookingsAPI(api_client)


class TestBookingsAPI:
    @pytest.mark.asyncio
    async def test_create_booking(self, fake_api: FakeAPI, bookings_api: BookingsAPI) -> None:
        fake_api.add("POST", "/bookings", envelope({"booking": BOOKING}, status_code=201))

        booking = await bookings_api.create_booking(
            CreateBookingData(campaign_id="c-1", ticket_type="VIP", quantity=2, issuance_type=IssuanceType.SEPARATE)
        )

        assert booking.is_payable
        assert len(booking.tickets) == 2
        sent = orjson.loads(fake_api.calls("POST", "/bookings")[0].content)
        assert sent == {"campaignId": "c-1", "ticketType": "VIP", "quantity": 2, "issuanceType": "SEPARATE"}

    @pytest.mark.asyncio
    async def test_get_my_bookings_with_filters(self, fake_api: FakeAPI, bookings_api: BookingsAPI) -> None:
        fake_api.add(
            "GET",
            "/bookings/my-bookings",
            envelope({"bookings": [BOOKING], "pagination": {"page": 1, "limit": 10, "total": 1, "pages": 1}}),
        )

        result = await bookings_api.get_my_bookings(BookingFilters(status=BookingStatus.PENDING, page=1))

        assert result.bookings[0].booking_ref == "BK-7F3E"
        assert result.pagination is not None and result.pagination.total == 1
        params = fake_api.calls("GET", "/bookings/my-bookings")[0].url.params
        assert dict(params) == {"status": "PENDING", "page": "1"}

    @pytest.mark.asyncio
    async def test_cancel_booking_returns_envelope(self, fake_api: FakeAPI, bookings_api: BookingsAPI) -> None:
        fake_api.add("POST", "/bookings/b-1/cancel", envelope(message="Booking cancelled"))

        result = await bookings_api.cancel_booking("b-1", reason="Can't make it")

        assert result == {"success": True, "message": "Booking cancelled"}
        assert orjson.loads(fake_api.calls("POST", "/bookings/b-1/cancel")[0].content) == {"reason": "Can't make it"}

    @pytest.mark.asyncio
    async def test_seller_views(self, fake_api: FakeAPI, bookings_api: BookingsAPI) -> None:
        fake_api.add("GET", "/bookings/campaign/c-1", envelope({"bookings": [BOOKING]}))
        fake_api.add("GET", "/bookings/campaign/c-1/stats", envelope({"totalBookings": 12, "revenue": 600000}))

        bookings = await bookings_api.get_by_campaign("c-1")
        stats = await bookings_api.get_campaign_stats("c-1")

        assert [booking.id for booking in bookings] == ["b-1"]
        assert stats["totalBookings"] == 12


class TestBookingDraft:
    def test_update_merges_into_existing_draft(self) -> None:
        draft = BookingDraft()
        draft.set_details(campaign_id="c-1", ticket_type="Regular", price=25000)

        details = draft.update_details(quantity=3)

        assert details.campaign_id == "c-1"
        assert details.quantity == 3
        assert details.total == 75000

    def test_update_without_draft_starts_one(self) -> None:
        draft = BookingDraft()

        draft.update_details(campaign_id="c-2")

        assert draft.current is not None and draft.current.campaign_id == "c-2"

    def test_explicit_total_wins(self) -> None:
        draft = BookingDraft()

        details = draft.set_details(price=25000, quantity=2, total_amount=45000)

        assert details.total == 45000

    def test_to_create_data(self) -> None:
        draft = BookingDraft()
        draft.set_details(campaign_id="c-1", ticket_type="VIP", quantity=2)

        data = draft.to_create_data()

        assert data.issuance_type == IssuanceType.SINGLE
        assert data.quantity == 2

    def test_incomplete_draft(self) -> None:
        draft = BookingDraft()
        draft.set_details(campaign_id="c-1")

        with pytest.raises(ValueError, match="ticket_type, quantity"):
            draft.to_create_data()

    def test_clear(self) -> None:
        draft = BookingDraft()
        draft.set_details(campaign_id="c-1")

        draft.clear()

        with pytest.raises(ValueError, match="No booking in progress"):
            draft.to_create_data()


def test_quantity_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        CreateBookingData(campaign_id="c-1", ticket_type="VIP", quantity=0)
