import pytest

from autoexpense.categorization import CATEGORIES, FALLBACK_CATEGORY, categorize


def test_categorize_whole_foods_to_food() -> None:
    assert categorize("Whole Foods Market", "Debit alert") == "Food & Dining"


def test_categorize_netflix_subscription() -> None:
    assert categorize("Netflix.com", "Subscription payment") == "Entertainment"


def test_categorize_unmatched_to_others() -> None:
    assert categorize("Acme Widgets", "Thanks for your business") == "Others"


def test_categorize_wholefds_abbreviation_to_groceries() -> None:
    assert categorize("WHOLEFDS MRKT", "Debit: $14.50") == "Groceries"


def test_categorize_content_only_match() -> None:
    assert categorize("Unknown", "Electricity bill payment received") == "Bills & Utilities"


def test_categorize_merchant_is_case_insensitive() -> None:
    assert categorize("UBER INDIA", None) == "Transport"


def test_categorize_word_start_only() -> None:
    # "seafood" does not start a word with "food"
    assert categorize("Seafoodhouse", "") == FALLBACK_CATEGORY


def test_categorize_first_rule_wins() -> None:
    # Swiggy (food) and Amazon (shopping) both match; food comes first.
    assert categorize("Swiggy Amazon", "") == "Food & Dining"


def test_categorize_empty() -> None:
    assert categorize(None) == "Others"


@pytest.mark.parametrize(
    "merchant",
    ["Apollo Pharmacy", "BigBasket", "Airtel Broadband", "PVR Cinemas", "Myntra"],
)
def test_categorize_returns_known_category(merchant: str) -> None:
    assert categorize(merchant, "") in CATEGORIES
