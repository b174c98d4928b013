"""Mailbox search keywords."""

import logging

from autoexpense.core.ids import new_stamp
from autoexpense.schemas.reference import Keyword
from autoexpense.storage.collections import Collection
from autoexpense.storage.router import StorageRouter

logger = logging.getLogger(__name__)

INCOME = "income"
EXPENSE = "expense"

DEFAULT_KEYWORDS: list[str] = [
    # Banks
    "Jupiter", "HDFC", "ICICI", "SBI", "Axis", "Kotak", "IDFC", "Yes Bank", "IndusInd",
    "BOI", "Bank of India", "PNB", "Canara", "Union Bank", "BOB", "Federal",
    # Payment apps
    "Paytm", "PhonePe", "Google Pay", "GPay", "Amazon Pay", "Mobikwik", "Freecharge",
    # Transaction words
    "UPI", "NEFT", "IMPS", "RTGS", "Credited", "Debited", "Paid", "Received",
    "Transaction", "Payment", "Transfer", "Salary", "Refund", "Cashback",
    # Card networks
    "Visa", "Mastercard", "RuPay", "Amex", "Diners",
]

INCOME_KEYWORDS = {"credited", "received", "salary", "refund", "cashback"}


def default_category(text: str) -> str:
    return INCOME if text.strip().lower() in INCOME_KEYWORDS else EXPENSE


class KeywordStore:
    """Keyword list persisted through the storage router."""

    def __init__(self, router: StorageRouter):
        self.router = router

    async def get_keywords(self) -> list[Keyword]:
        return await self.router.load(Collection.KEYWORDS)

    async def save_keywords(self, keywords: list[Keyword]) -> None:
        await self.router.save(Collection.KEYWORDS, keywords)

    async def keyword_texts(self) -> list[str]:
        return [k.keyword for k in await self.get_keywords()]

    async def merge_defaults(self, defaults: list[str] | None = None) -> list[str]:
        """Add any default keyword not already present (case-insensitive).

        Returns:
            The keywords that were added; nothing is written when empty

        Raises:
            RemoteStoreError: If the current list cannot be read from the remote store
        """
        keywords = await self.router.load(Collection.KEYWORDS, fresh=True)
        present = {k.keyword.lower() for k in keywords}
        added: list[str] = []
        for text in DEFAULT_KEYWORDS if defaults is None else defaults:
            if text.lower() in present:
                continue
            keywords.append(Keyword(id=new_stamp()[0], keyword=text, category=default_category(text)))
            present.add(text.lower())
            added.append(text)
        if added:
            await self.save_keywords(keywords)
            logger.info("Merged default keywords", extra={"added": len(added)})
        return added

    async def add_keyword(self, text: str, category: str | None = None) -> Keyword:
        keyword = Keyword(id=new_stamp()[0], keyword=text.strip(), category=category or default_category(text))
        await self.router.add(Collection.KEYWORDS, keyword)
        return keyword

    async def remove_keyword(self, keyword_id: str) -> bool:
        return await self.router.delete_by_id(Collection.KEYWORDS, keyword_id)

    async def replace_texts(self, texts: list[str]) -> list[Keyword]:
        """Set the keyword list to ``texts``, keeping ids and categories of survivors."""
        existing = {k.keyword.lower(): k for k in await self.router.load(Collection.KEYWORDS, fresh=True)}
        keywords: list[Keyword] = []
        seen: set[str] = set()
        for text in texts:
            key = text.strip().lower()
            if not key or key in seen:
                continue
            seen.add(key)
            keywords.append(
                existing.get(key)
                or Keyword(id=new_stamp()[0], keyword=text.strip(), category=default_category(text))
            )
        await self.save_keywords(keywords)
        return keywords
