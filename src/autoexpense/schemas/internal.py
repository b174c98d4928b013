"""Internal data schemas for retrieved messages and parsed candidates.

These models represent the intermediate data between the mailbox and the
approval gate. Message bodies may contain account details and are never
logged.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class RawMessage(BaseModel):
    """A fetched email with its text body already decoded."""

    id: str
    sender: str = ""
    subject: str = ""
    date: str = Field("", description="Raw Date header")
    body: str = ""


class Confidence(str, Enum):
    """How much of a message a rule was able to extract.

    NONE means the message looked transactional but no amount was found;
    such candidates are always routed to manual review.
    """

    HIGH = "high"
    LOW = "low"
    NONE = "none"


class ParsedTransaction(BaseModel):
    """A candidate transaction extracted from one message."""

    message_id: str
    sender: str = ""
    subject: str = ""
    occurred_at: datetime
    time_label: str = ""
    message: str = Field("", description="Decoded body (may contain PII)")
    merchant: str
    amount: str = Field(..., description="Two-decimal amount string, '0.00' when unknown")
    category: str
    payment_method: str
    rule: str = Field(..., description="Name of the rule that produced this candidate")
    confidence: Confidence = Confidence.HIGH
