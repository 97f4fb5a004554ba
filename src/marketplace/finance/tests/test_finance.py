import orjson
import pytest
from pydantic import ValidationError

from conftest import FakeAPI, envelope
from marketplace.api.client import APIClient
from marketplace.finance.api import FinanceAPI
from marketplace.finance.schema import (
    AddWithdrawalMethodData,
    RequestWithdrawalData,
    TransactionType,
    WithdrawalMethodType,
    WithdrawalStatus,
)

DASHBOARD = {
    "finance": {"totalEarnings": 900000, "availableBalance": 600000, "pendingBalance": 300000, "withdrawnAmount": 0},
    "transactions": [{"id": "tx-1", "type": "SALE", "amount": 150000, "reference": "BK-7F3E"}],
    "withdrawalMethods": [
        {"id": "wm-1", "method": "MOBILE_MONEY", "accountName": "Kampala Live", "mobileNumber": "256700123456"},
        {"id": "wm-2", "method": "BANK_ACCOUNT", "accountName": "Kampala Live", "isDefault": True},
    ],
}


@pytest.fixture
def finance_api(api_client: APIClient) -> FinanceAPI:
    return FinanceAPI(api_client)


@pytest.mark.asyncio
async def test_dashboard(fake_api: FakeAPI, finance_api: FinanceAPI) -> None:
    fake_api.add("GET", "/finance/dashboard", envelope(DASHBOARD))

    dashboard = await finance_api.get_dashboard()

    assert dashboard.finance.available_balance == 600000
    assert dashboard.transactions[0].type == TransactionType.SALE
    assert dashboard.default_method is not None and dashboard.default_method.id == "wm-2"


@pytest.mark.asyncio
async def test_add_and_remove_withdrawal_method(fake_api: FakeAPI, finance_api: FinanceAPI) -> None:
    fake_api.add("POST", "/finance/withdrawal-methods", envelope({"methodId": "wm-3"}, status_code=201))
    fake_api.add("DELETE", "/finance/withdrawal-methods/wm-3", envelope({"success": True}))

    method_id = await finance_api.add_withdrawal_method(
        AddWithdrawalMethodData(
            method=WithdrawalMethodType.MOBILE_MONEY,
            account_name="Kampala Live",
            mobile_provider="MTN",
            mobile_number="256700123456",
        )
    )
    removed = await finance_api.remove_withdrawal_method("wm-3")

    assert method_id == "wm-3"
    assert removed is True
    sent = orjson.loads(fake_api.calls("POST", "/finance/withdrawal-methods")[0].content)
    assert sent["mobileProvider"] == "MTN"


@pytest.mark.asyncio
async def test_request_withdrawal(fake_api: FakeAPI, finance_api: FinanceAPI) -> None:
    fake_api.add("POST", "/finance/withdrawals", envelope({"withdrawalId": "w-1", "status": "PENDING"}))

    result = await finance_api.request_withdrawal(RequestWithdrawalData(amount=200000, method_id="wm-2"))

    assert result.withdrawal_id == "w-1"
    sent = orjson.loads(fake_api.calls("POST", "/finance/withdrawals")[0].content)
    assert sent == {"amount": 200000.0, "methodId": "wm-2"}


@pytest.mark.asyncio
async def test_list_queries(fake_api: FakeAPI, finance_api: FinanceAPI) -> None:
    fake_api.add(
        "GET",
        "/finance/withdrawals",
        envelope({"withdrawals": [{"id": "w-1", "amount": 200000, "status": "PROCESSING"}]}),
    )
    fake_api.add("GET", "/finance/transactions", envelope({"transactions": []}))
    fake_api.add("GET", "/finance/analytics", envelope({"revenue": [{"period": "2026-03", "amount": 900000}]}))

    withdrawals = await finance_api.get_withdrawals(WithdrawalStatus.PROCESSING)
    transactions = await finance_api.get_transactions(type="SALE", start_date="2026-03-01")
    analytics = await finance_api.get_analytics(period="month", group_by="campaign")

    assert withdrawals[0].status == WithdrawalStatus.PROCESSING
    assert transactions == []
    assert analytics["revenue"][0]["amount"] == 900000
    assert dict(fake_api.calls("GET", "/finance/withdrawals")[0].url.params) == {"status": "PROCESSING"}
    assert dict(fake_api.calls("GET", "/finance/transactions")[0].url.params) == {
        "type": "SALE",
        "startDate": "2026-03-01",
    }
    assert dict(fake_api.calls("GET", "/finance/analytics")[0].url.params) == {"period": "month", "groupBy": "campaign"}


@pytest.mark.parametrize(
    "method,fields,missing",
    [
        (WithdrawalMethodType.BANK_ACCOUNT, {"bank_name": "Stanbic"}, "account_number"),
        (WithdrawalMethodType.MOBILE_MONEY, {"mobile_provider": "Airtel"}, "mobile_number"),
        (WithdrawalMethodType.PAYPAL, {}, "paypal_email"),
    ],
)
def test_withdrawal_method_requires_details(method: WithdrawalMethodType, fields: dict[str, str], missing: str) -> None:
    with pytest.raises(ValidationError, match=f"{method.value} requires: {missing}"):
        AddWithdrawalMethodData(method=method, account_name="Kampala Live", **fields)


def test_withdrawal_amount_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        RequestWithdrawalData(amount=0, method_id="wm-2")
