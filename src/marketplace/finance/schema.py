"""Schema for seller finance: balances, withdrawal methods, withdrawals."""

import typing as t
from datetime import datetime
from enum import StrEnum

from pydantic import EmailStr, Field, model_validator

from marketplace.common.schema import Schema


class WithdrawalStatus(StrEnum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class WithdrawalMethodType(StrEnum):
    BANK_ACCOUNT = "BANK_ACCOUNT"
    MOBILE_MONEY = "MOBILE_MONEY"
    PAYPAL = "PAYPAL"


class TransactionType(StrEnum):
    SALE = "SALE"
    WITHDRAWAL = "WITHDRAWAL"
    REFUND = "REFUND"
    FEE = "FEE"


class Balances(Schema):
    total_earnings: float = 0
    available_balance: float = 0
    pending_balance: float = 0
    withdrawn_amount: float = 0
    available_for_withdrawal: float | None = None
    estimated_taxes: float | None = None
    next_payout_date: datetime | None = None


class Transaction(Schema):
    id: str
    type: TransactionType
    amount: float
    reference: str = ""
    description: str = ""
    date: datetime | None = None


class WithdrawalMethod(Schema):
    id: str
    method: WithdrawalMethodType
    account_name: str
    account_number: str | None = None
    bank_name: str | None = None
    bank_code: str | None = None
    mobile_provider: str | None = None
    mobile_number: str | None = None
    paypal_email: str | None = None
    is_default: bool = False
    status: t.Literal["PENDING", "VERIFIED"] = "PENDING"


class FinanceDashboard(Schema):
    finance: Balances = Field(default_factory=Balances)
    transactions: list[Transaction] = Field(default_factory=list)
    withdrawal_methods: list[WithdrawalMethod] = Field(default_factory=list)

    @property
    def default_method(self) -> WithdrawalMethod | None:
        return next((method for method in self.withdrawal_methods if method.is_default), None)


class Withdrawal(Schema):
    id: str
    amount: float
    fee: float | None = None
    net_amount: float | None = None
    status: WithdrawalStatus
    method: WithdrawalMethod | None = None
    requested_date: datetime | None = None
    processed_date: datetime | None = None


class AddWithdrawalMethodData(Schema):
    method: WithdrawalMethodType
    account_name: str = Field(..., min_length=2)
    account_number: str | None = None
    bank_name: str | None = None
    bank_code: str | None = None
    mobile_provider: str | None = None
    mobile_number: str | None = None
    paypal_email: EmailStr | None = None
    set_as_default: bool | None = None

    @model_validator(mode="after")
    def method_details_present(self) -> t.Self:
        """Validate that the fields the chosen method needs are present."""
        required = {
            WithdrawalMethodType.BANK_ACCOUNT: ("account_number", "bank_name"),
            WithdrawalMethodType.MOBILE_MONEY: ("mobile_provider", "mobile_number"),
            WithdrawalMethodType.PAYPAL: ("paypal_email",),
        }[self.method]
        missing = [name for name in required if not getattr(self, name)]
        if missing:
            raise ValueError(f"{self.method.value} requires: {', '.join(missing)}")
        return self


class RequestWithdrawalData(Schema):
    amount: float = Field(..., gt=0)
    method_id: str = Field(..., min_length=1)


class WithdrawalRequested(Schema):
    withdrawal_id: str
    status: str
