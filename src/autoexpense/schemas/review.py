"""Manual review schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from autoexpense.schemas.transaction import Transaction, validate_amount


class ReviewEdits(BaseModel):
    """Corrections a reviewer may apply while approving."""

    merchant: str | None = None
    amount: str | None = None
    category: str | None = None
    payment_method: str | None = None
    notes: str | None = None
    occurred_at: datetime | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_is_decimal(cls, v) -> str | None:
        if v is None:
            return None
        return validate_amount(v)


class ApproveRequest(ReviewEdits):
    remember_sender: bool = Field(True, description="Auto-file future messages from this sender")


class RoutingDecision(BaseModel):
    """Outcome of routing one candidate: exactly one field is set."""

    auto_filed: Transaction | None = None
    pending_review: Transaction | None = None


class IngestionResult(BaseModel):
    fetched: int = 0
    parsed: int = 0
    duplicates: int = 0
    auto_filed: int = 0
    pending_review: int = 0
    failed: int = 0
