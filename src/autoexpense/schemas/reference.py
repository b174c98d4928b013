"""Reference data: categories, payment methods, keywords, approved senders."""

from pydantic import BaseModel, Field, field_validator


class Category(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    icon: str = ""
    color: str = ""
    description: str = ""


class PaymentMethod(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    type: str = ""
    icon: str = ""
    color: str = ""
    description: str = ""
    last4: str = ""


class Keyword(BaseModel):
    """A mailbox search term, optionally hinting at a category."""

    id: str
    keyword: str = Field(..., min_length=1)
    category: str = Field("expense", description="expense or income")


class KeywordsUpdate(BaseModel):
    keywords: list[str]

    @field_validator("keywords")
    @classmethod
    def strip_blank(cls, v: list[str]) -> list[str]:
        return [k.strip() for k in v if k and k.strip()]


class ApprovedSender(BaseModel):
    """A sender whose well-parsed messages are filed without review."""

    sender: str = Field(..., min_length=1)
    payment_method: str | None = None
    category: str | None = None
