"""Seller finance endpoints."""

import typing as t

from marketplace.api.base import BaseAPI, unwrap
from marketplace.common.schema import query_params

from .schema import (
    AddWithdrawalMethodData,
    FinanceDashboard,
    RequestWithdrawalData,
    Transaction,
    Withdrawal,
    WithdrawalRequested,
    WithdrawalStatus,
)


class FinanceAPI(BaseAPI):
    """Wraps the `/finance` endpoints."""

    async def get_dashboard(self) -> FinanceDashboard:
        """Balances, recent transactions and the configured withdrawal methods."""
        data = await self._get_data("/finance/dashboard")
        return FinanceDashboard.model_validate(data)

    async def add_withdrawal_method(self, method_data: AddWithdrawalMethodData) -> str:
        """Register a payout destination.

        Returns:
            The new method's id.
        """
        data = await self._post_data("/finance/withdrawal-methods", method_data.to_payload())
        return str(data["methodId"])

    async def remove_withdrawal_method(self, method_id: str) -> bool:
        data = unwrap(await self.client.delete(f"/finance/withdrawal-methods/{method_id}"))
        return bool((data or {}).get("success", True))

    async def request_withdrawal(self, withdrawal_data: RequestWithdrawalData) -> WithdrawalRequested:
        """Ask for a payout; settlement happens server-side."""
        data = await self._post_data("/finance/withdrawals", withdrawal_data.to_payload())
        return WithdrawalRequested.model_validate(data)

    async def get_withdrawals(self, status: WithdrawalStatus | None = None) -> list[Withdrawal]:
        data = await self._get_data("/finance/withdrawals", params=query_params({"status": status}))
        return [Withdrawal.model_validate(item) for item in data.get("withdrawals") or []]

    async def get_transactions(
        self,
        type: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> list[Transaction]:
        params = query_params({"type": type, "startDate": start_date, "endDate": end_date})
        data = await self._get_data("/finance/transactions", params=params)
        return [Transaction.model_validate(item) for item in data.get("transactions") or []]

    async def get_analytics(self, period: str | None = None, group_by: str | None = None) -> dict[str, t.Any]:
        """Revenue analytics, grouped as the server sees fit for `period` and `group_by`."""
        params = query_params({"period": period, "groupBy": group_by})
        return t.cast(dict[str, t.Any], await self._get_data("/finance/analytics", params=params))
