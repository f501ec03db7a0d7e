from __future__ import annotations

import datetime as dt
from datetime import datetime
from decimal import Decimal
from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .models import (
    AccountType,
    RecurringInterval,
    TransactionStatus,
    TxnType,
)
from .utils.money import to_decimal


T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: Literal[True] = True
    data: T


class ErrorBody(BaseModel):
    kind: str
    message: str
    details: Any | None = None


class FailureEnvelope(BaseModel):
    success: Literal[False] = False
    error: ErrorBody


def ok(data: Any) -> dict[str, Any]:
    return {"success": True, "data": data}


def _coerce_money(value: Any) -> Any:
    if value is None:
        return None
    return to_decimal(value)


# ---- Accounts -------------------------------------------------------------


class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: AccountType
    balance: Decimal = Decimal("0.00")
    is_default: bool = False

    model_config = ConfigDict(extra="forbid")

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("balance", mode="before")
    @classmethod
    def parse_balance(cls, value: Any) -> Any:
        return to_decimal(value)


class AccountOut(BaseModel):
    id: int
    user_id: int
    name: str
    type: AccountType
    balance: Decimal
    is_default: bool
    created_at: datetime
    updated_at: datetime
    transaction_count: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


# ---- Transactions ---------------------------------------------------------


class TransactionCreate(BaseModel):
    account_id: int = Field(gt=0)
    type: TxnType
    amount: Decimal = Field(gt=0)
    date: datetime
    description: Optional[str] = Field(default=None, max_length=500)
    category: str = Field(min_length=1, max_length=50)
    status: TransactionStatus = TransactionStatus.COMPLETED
    is_recurring: bool = False
    recurring_interval: Optional[RecurringInterval] = None
    receipt_url: Optional[str] = Field(default=None, max_length=500)

    model_config = ConfigDict(extra="forbid")

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return to_decimal(value)

    @model_validator(mode="after")
    def check_recurrence(self) -> "TransactionCreate":
        if self.is_recurring and self.recurring_interval is None:
            raise ValueError("recurring_interval is required for recurring transactions")
        if not self.is_recurring:
            self.recurring_interval = None
        return self


class TransactionUpdate(BaseModel):
    """Partial update; only the fields that are sent are applied."""

    account_id: Optional[int] = Field(default=None, gt=0)
    type: Optional[TxnType] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)
    category: Optional[str] = Field(default=None, min_length=1, max_length=50)
    status: Optional[TransactionStatus] = None
    is_recurring: Optional[bool] = None
    recurring_interval: Optional[RecurringInterval] = None
    receipt_url: Optional[str] = Field(default=None, max_length=500)

    model_config = ConfigDict(extra="forbid")

    @field_validator("amount", mode="before")
    @classmethod
    def parse_amount(cls, value: Any) -> Any:
        return _coerce_money(value)

    @model_validator(mode="after")
    def reject_null_required(self) -> "TransactionUpdate":
        for key in ("account_id", "type", "amount", "date", "category", "status", "is_recurring"):
            if key in self.model_fields_set and getattr(self, key) is None:
                raise ValueError(f"{key} cannot be null")
        return self


class TransactionOut(BaseModel):
    id: int
    user_id: int
    account_id: int
    type: TxnType
    amount: Decimal
    date: datetime
    description: Optional[str]
    category: str
    receipt_url: Optional[str]
    status: TransactionStatus
    is_recurring: bool
    recurring_interval: Optional[RecurringInterval]
    next_recurring_date: Optional[datetime]
    last_processed: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountDetailOut(AccountOut):
    transactions: list[TransactionOut] = Field(default_factory=list)


class TransactionsBulkDelete(BaseModel):
    ids: list[int] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class TransactionsBulkDeleteResult(BaseModel):
    deleted: int


# ---- Reporting ------------------------------------------------------------


class ChartPoint(BaseModel):
    date: dt.date
    income: Decimal
    expense: Decimal

    model_config = ConfigDict(from_attributes=True)


class ChartTotals(BaseModel):
    income: Decimal
    expense: Decimal
    net: Decimal


class AccountChartOut(BaseModel):
    range: str
    points: list[ChartPoint]
    totals: ChartTotals


# ---- Receipts / recurring / maintenance -----------------------------------


class ReceiptScanOut(BaseModel):
    amount: Optional[Decimal] = None
    date: Optional[datetime] = None
    description: Optional[str] = None
    category: Optional[str] = None
    merchant_name: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in type(self).model_fields)


class RecurringProcessResult(BaseModel):
    processed: int
    transaction_ids: list[int] = Field(default_factory=list)


class SeedRequest(BaseModel):
    account_id: int = Field(gt=0)
    days: int = Field(default=90, ge=1, le=366)

    model_config = ConfigDict(extra="forbid")


class SeedResult(BaseModel):
    created: int
    balance: Decimal
