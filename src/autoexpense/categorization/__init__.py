"""Transaction categorization utilities.

Deterministic, local categorization of transactions from the merchant name
and message text. Rule-based, with no network calls, so the same message
always lands in the same category.
"""

from .rules import CATEGORIES, FALLBACK_CATEGORY, categorize

__all__ = ["CATEGORIES", "FALLBACK_CATEGORY", "categorize"]
