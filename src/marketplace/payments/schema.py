"""Schema for payments."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from marketplace.common.schema import Pagination, Schema


class PaymentStatus(StrEnum):
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentBookingCampaign(Schema):
    title: str


class PaymentBooking(Schema):
    id: str
    booking_ref: str
    campaign: PaymentBookingCampaign | None = None


class Payment(Schema):
    id: str
    reference: str
    amount: float
    currency: str
    # Kept as a string: the gateway callback reports e.g. "completed" next to the enum values.
    status: str
    payment_method: str | None = None
    booking: PaymentBooking | None = None
    created_at: datetime | None = None

    @property
    def is_successful(self) -> bool:
        return self.status.upper() in {PaymentStatus.SUCCESS, "COMPLETED"}


class InitializePaymentData(Schema):
    booking_id: str = Field(..., min_length=1)
    currency: str | None = None


class PaymentLink(Schema):
    """Where to send the customer to pay."""

    payment_id: str
    payment_link: str
    reference: str
    amount: float
    currency: str


class PaymentHistory(Schema):
    payments: list[Payment] = Field(default_factory=list)
    pagination: Pagination | None = None


class PaymentFilters(Schema):
    status: PaymentStatus | None = None
    page: int | None = None
    limit: int | None = None
