"""Schema for bookings and tickets."""

import typing as t
from datetime import datetime
from enum import StrEnum

from pydantic import Field

from marketplace.common.schema import Pagination, Schema


class BookingStatus(StrEnum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"


class IssuanceType(StrEnum):
    """Whether the tickets of a booking come as one ticket or one per seat."""

    SINGLE = "SINGLE"
    SEPARATE = "SEPARATE"


class TicketStatus(StrEnum):
    VALID = "VALID"
    USED = "USED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class Ticket(Schema):
    id: str
    ticket_number: str
    qr_code: str
    pdf_url: str | None = None
    status: TicketStatus = TicketStatus.VALID
    scan_count: int = 0
    max_scans: int = 1
    booking_id: str
    created_at: datetime | None = None


class BookingCampaign(Schema):
    id: str
    title: str
    event_date: datetime | None = None
    venue: str = ""
    cover_image: str = ""


class BookingPayment(Schema):
    id: str
    status: str
    amount: float
    payment_method: str | None = None
    reference: str | None = None


class Booking(Schema):
    id: str
    booking_ref: str
    status: BookingStatus
    quantity: int
    ticket_type: str
    issuance_type: IssuanceType = IssuanceType.SINGLE
    total_amount: float
    payment_deadline: datetime | None = None
    campaign: BookingCampaign | None = None
    payment: BookingPayment | None = None
    tickets: list[Ticket] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_payable(self) -> bool:
        return self.status == BookingStatus.PENDING


class BookingList(Schema):
    bookings: list[Booking] = Field(default_factory=list)
    pagination: Pagination | None = None


class BookingFilters(Schema):
    status: BookingStatus | None = None
    campaign_id: str | None = None
    page: int | None = None
    limit: int | None = None


class CreateBookingData(Schema):
    campaign_id: str = Field(..., min_length=1)
    ticket_type: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    issuance_type: IssuanceType = IssuanceType.SINGLE


class BookingDraftDetails(Schema):
    campaign_id: str | None = None
    campaign_title: str | None = None
    ticket_type: str | None = None
    quantity: int | None = None
    issuance_type: IssuanceType = IssuanceType.SINGLE
    price: float | None = None
    total_amount: float | None = None

    @property
    def total(self) -> float | None:
        """The explicit total, else price times quantity."""
        if self.total_amount is not None:
            return self.total_amount
        if self.price is None or self.quantity is None:
            return None
        return self.price * self.quantity


class CancelBookingData(Schema):
    reason: str | None = None


CampaignBookingStats = dict[str, t.Any]
