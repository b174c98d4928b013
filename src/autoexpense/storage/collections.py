"""Logical collections and how they are keyed in each backend."""

from enum import Enum

from pydantic import BaseModel

from autoexpense.schemas.reference import ApprovedSender, Category, Keyword, PaymentMethod
from autoexpense.schemas.transaction import Transaction

CACHE_SUFFIX = "_CACHE"

# Spreadsheet rows have no column for these; pending ones are kept locally.
REVIEW_METADATA_KEY = "pending_review_metadata"
REVIEW_FIELDS = ("sender", "raw_message")


class Collection(str, Enum):
    CATEGORIES = "categories"
    PAYMENT_METHODS = "payment_methods"
    KEYWORDS = "keywords"
    APPROVED_SENDERS = "approved_senders"
    TRANSACTIONS = "transactions"

    @property
    def storage_key(self) -> str:
        """Key of the collection's blob in the local encrypted store."""
        return _STORAGE_KEYS[self]

    @property
    def id_field(self) -> str:
        return "sender" if self is Collection.APPROVED_SENDERS else "id"

    @property
    def schema(self) -> type[BaseModel]:
        return _SCHEMAS[self]


_STORAGE_KEYS = {
    Collection.CATEGORIES: "categories",
    Collection.PAYMENT_METHODS: "payment_methods",
    Collection.KEYWORDS: "bank_keywords",
    Collection.APPROVED_SENDERS: "approved_senders",
    Collection.TRANSACTIONS: "app_transactions",
}

_SCHEMAS: dict[Collection, type[BaseModel]] = {
    Collection.CATEGORIES: Category,
    Collection.PAYMENT_METHODS: PaymentMethod,
    Collection.KEYWORDS: Keyword,
    Collection.APPROVED_SENDERS: ApprovedSender,
    Collection.TRANSACTIONS: Transaction,
}


def item_id(collection: Collection, item: dict) -> str:
    return str(item.get(collection.id_field, ""))
