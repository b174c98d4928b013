"""Deterministic transaction categorization.

Transaction alerts carry no category, so one is inferred from the merchant
name and the message text. Rules are ordered keyword sets per category; the
first category whose merchant keywords match the merchant, or whose content
keywords match the message, wins. No match means "Others".

Keywords match case-insensitively at the start of a word, so "food" also
matches "Foods" but not "seafood".
"""

from __future__ import annotations

import re

FALLBACK_CATEGORY = "Others"


def _words(*keywords: str) -> re.Pattern[str]:
    alternation = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternation})", re.IGNORECASE)


# Ordering matters: earlier matches win.
# (category, merchant keywords, content keywords)
_RULES: list[tuple[str, re.Pattern[str], re.Pattern[str]]] = [
    (
        "Food & Dining",
        _words(
            "restaurant", "cafe", "sweets", "food", "kitchen", "dhaba", "pizza",
            "burger", "biryani", "swiggy", "zomato", "domino", "mcdonald", "kfc", "subway",
        ),
        _words("food", "sweet", "dinner", "lunch", "breakfast", "meal", "dining", "restaurant", "cafe"),
    ),
    (
        "Shopping",
        _words(
            "amazon", "flipkart", "myntra", "ajio", "store", "mart", "mall", "shop",
            "retail", "fashion", "clothing", "electronics",
        ),
        _words("shopping", "purchase", "bought", "ordered"),
    ),
    (
        "Transport",
        _words(
            "uber", "ola", "rapido", "taxi", "cab", "metro", "bus", "train", "petrol",
            "diesel", "fuel", "parking",
        ),
        _words("ride", "transport", "travel", "commute", "fuel"),
    ),
    (
        "Entertainment",
        _words(
            "netflix", "prime", "hotstar", "spotify", "youtube", "movie", "cinema",
            "pvr", "inox", "bookmyshow", "game",
        ),
        _words("subscription", "entertainment", "movie", "cinema", "streaming", "music"),
    ),
    (
        "Groceries",
        _words(
            "grocery", "supermarket", "blinkit", "zepto", "dunzo", "bigbasket", "dmart",
            "reliance", "fresh", "vegetable", "fruit", "wholefds", "whole fds",
        ),
        _words("grocery", "groceries", "vegetables", "fruits", "provisions"),
    ),
    (
        "Bills & Utilities",
        _words(
            "electric", "water", "gas", "internet", "broadband", "mobile", "recharge",
            "bill", "utility",
        ),
        _words("bill payment", "utility", "recharge", "electricity", "water", "gas"),
    ),
    (
        "Healthcare",
        _words(
            "hospital", "clinic", "doctor", "pharmacy", "medicine", "medical", "health",
            "apollo", "fortis", "max",
        ),
        _words("medical", "medicine", "doctor", "hospital", "health", "pharmacy"),
    ),
]

# Public taxonomy, in rule order.
CATEGORIES: list[str] = [name for name, _, _ in _RULES] + [FALLBACK_CATEGORY]


def categorize(merchant: str | None, content: str | None = None) -> str:
    """Return the category for a merchant/message pair.

    Args:
        merchant: Extracted merchant name
        content: Full message text (subject and body)

    Returns:
        One of CATEGORIES; FALLBACK_CATEGORY when nothing matches
    """
    merchant = merchant or ""
    content = content or ""
    for category, merchant_pattern, content_pattern in _RULES:
        if merchant_pattern.search(merchant) or content_pattern.search(content):
            return category
    return FALLBACK_CATEGORY
