"""Transaction request/response schemas."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autoexpense.core.money import parse_amount


class TransactionType(str, Enum):
    EXPENSE = "expense"
    INCOME = "income"


class TransactionStatus(str, Enum):
    """Lifecycle of a transaction.

    Manual entries and auto-filed ones are completed; everything the
    approval gate cannot vouch for waits as pending until reviewed.
    """

    COMPLETED = "completed"
    PENDING = "pending"
    REJECTED = "rejected"


def validate_amount(v: str) -> str:
    amount = parse_amount(v)
    if amount < 0:
        raise ValueError("Amount must be non-negative")
    return str(v).strip().replace(",", "")


class Transaction(BaseModel):
    """A stored transaction.

    The amount is kept as the exact decimal string it was saved with;
    arithmetic converts it on demand.
    """

    model_config = ConfigDict(use_enum_values=True)

    id: str
    merchant: str
    amount: str
    category: str
    payment_method: str | None = None
    occurred_at: datetime
    type: TransactionType = TransactionType.EXPENSE
    status: TransactionStatus = TransactionStatus.COMPLETED
    notes: str | None = None
    raw_message: str | None = Field(None, description="Original message body (pending items)")
    sender: str | None = Field(None, description="Sender address of the source message")
    created_at: datetime | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_is_decimal(cls, v) -> str:
        return validate_amount(v)

    @field_validator("occurred_at", "created_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("merchant")
    @classmethod
    def merchant_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Merchant cannot be empty")
        return v.strip()


class TransactionCreate(BaseModel):
    """Manual entry request."""

    model_config = ConfigDict(use_enum_values=True)

    merchant: str = Field(..., min_length=1)
    amount: str
    category: str = Field(..., min_length=1)
    payment_method: str | None = None
    occurred_at: datetime | None = Field(None, description="Defaults to now")
    type: TransactionType = TransactionType.EXPENSE
    notes: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_is_decimal(cls, v) -> str:
        return validate_amount(v)


class TransactionUpdate(BaseModel):
    """Partial update; unset fields are left untouched."""

    model_config = ConfigDict(use_enum_values=True)

    merchant: str | None = None
    amount: str | None = None
    category: str | None = None
    payment_method: str | None = None
    occurred_at: datetime | None = None
    type: TransactionType | None = None
    notes: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_is_decimal(cls, v) -> str | None:
        if v is None:
            return None
        return validate_amount(v)


class CategoryTotal(BaseModel):
    category: str
    total: str


class DailyTotal(BaseModel):
    day: str
    total: str


class TransactionSummary(BaseModel):
    """Totals for a time window over non-rejected transactions."""

    start: datetime | None = None
    end: datetime | None = None
    expense_total: str
    income_total: str
    net: str
    by_category: list[CategoryTotal]
    daily: list[DailyTotal]
    recent: list[Transaction]
    count: int
