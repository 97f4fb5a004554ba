"""Resolution of the payment gateway's redirect back to the marketplace.

The gateway returns the customer with `OrderMerchantReference` (our payment
reference) and `OrderTrackingId` (the gateway's own id) as query parameters.
Only the merchant reference can be verified against the API.
"""

import typing as t
from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import parse_qs, urlsplit

import structlog

from marketplace.common.exceptions import APIError

from .api import PaymentsAPI
from .schema import Payment

logger = structlog.get_logger(__name__)

MERCHANT_REFERENCE_PARAM = "OrderMerchantReference"
TRACKING_ID_PARAM = "OrderTrackingId"


class CallbackStatus(StrEnum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class PaymentCallbackResult:
    status: CallbackStatus
    message: str
    merchant_reference: str | None = None
    tracking_id: str | None = None
    payment: Payment | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == CallbackStatus.SUCCESS


def parse_callback(url_or_query: str | t.Mapping[str, str]) -> tuple[str | None, str | None]:
    """Extract (merchant reference, tracking id) from a callback URL, query string or mapping."""
    if isinstance(url_or_query, str):
        query = urlsplit(url_or_query).query if "?" in url_or_query or "://" in url_or_query else url_or_query
        parsed = {key: values[0] for key, values in parse_qs(query).items() if values}
    else:
        parsed = dict(url_or_query)
    return parsed.get(MERCHANT_REFERENCE_PARAM) or None, parsed.get(TRACKING_ID_PARAM) or None


async def resolve_payment_callback(
    payments: PaymentsAPI, url_or_query: str | t.Mapping[str, str]
) -> PaymentCallbackResult:
    """Verify the payment named in a gateway callback.

    Args:
        payments: Payments API used to verify the reference.
        url_or_query: The callback URL, its query string, or the parsed parameters.

    Returns:
        The outcome to show the customer. Never raises for API failures.
    """
    reference, tracking_id = parse_callback(url_or_query)

    if not reference:
        message = (
            "Invalid payment reference (Merchant Reference missing)"
            if tracking_id
            else "Payment details missing in callback"
        )
        logger.warning("payment_callback_incomplete", tracking_id=tracking_id)
        return PaymentCallbackResult(CallbackStatus.FAILED, message, tracking_id=tracking_id)

    try:
        payment = await payments.verify_payment(reference)
    except APIError as e:
        logger.warning("payment_verification_failed", reference=reference, status=e.status_code, error=e.message)
        return PaymentCallbackResult(
            CallbackStatus.FAILED,
            "Failed to verify payment. Please contact support.",
            merchant_reference=reference,
            tracking_id=tracking_id,
        )

    if payment.is_successful:
        logger.info("payment_verified", reference=reference)
        return PaymentCallbackResult(
            CallbackStatus.SUCCESS,
            "Payment successful! Your booking has been confirmed.",
            merchant_reference=reference,
            tracking_id=tracking_id,
            payment=payment,
        )

    logger.info("payment_not_successful", reference=reference, payment_status=payment.status)
    return PaymentCallbackResult(
        CallbackStatus.FAILED,
        "Payment verification failed. Please contact support.",
        merchant_reference=reference,
        tracking_id=tracking_id,
        payment=payment,
    )
