"""Payment endpoints."""

import typing as t

from marketplace.api.base import BaseAPI
from marketplace.common.schema import query_params
from marketplace.conf import settings

from .schema import InitializePaymentData, Payment, PaymentFilters, PaymentHistory, PaymentLink


class PaymentsAPI(BaseAPI):
    """Wraps the `/payments` endpoints."""

    async def initialize_payment(self, payment_data: InitializePaymentData) -> PaymentLink:
        """Start a gateway payment for a booking.

        The currency defaults to settings.DEFAULT_CURRENCY (UGX).

        Returns:
            The payment link the customer must be redirected to.
        """
        payload = {**payment_data.to_payload(), "currency": payment_data.currency or settings.DEFAULT_CURRENCY}
        data = await self._post_data("/payments/initialize", payload)
        return PaymentLink.model_validate(data)

    async def verify_payment(self, reference: str) -> Payment:
        """Ask the server to confirm a payment with the gateway."""
        data = await self._get_data(f"/payments/verify/{reference}")
        return Payment.model_validate(data["payment"])

    async def get_payment_history(self, filters: PaymentFilters | None = None) -> PaymentHistory:
        data = await self._get_data("/payments/history", params=query_params(filters))
        return PaymentHistory.model_validate(data)

    async def request_refund(self, payment_id: str, reason: str) -> dict[str, t.Any]:
        data = await self._post_data(f"/payments/{payment_id}/refund", {"reason": reason})
        return t.cast(dict[str, t.Any], data.get("refund") or {})
