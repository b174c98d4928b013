"""Unit tests for TransactionAggregator."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from autoexpense.schemas.transaction import Transaction
from autoexpense.services.aggregator import TransactionAggregator

NOW = datetime(2024, 10, 24, 12, 0, tzinfo=timezone.utc)


def _tx(
    id_: str,
    amount: str,
    category: str = "Food & Dining",
    type_: str = "expense",
    status: str = "completed",
    days_ago: int = 0,
) -> Transaction:
    return Transaction(
        id=id_,
        merchant=f"Merchant {id_}",
        amount=amount,
        category=category,
        type=type_,
        status=status,
        occurred_at=NOW - timedelta(days=days_ago),
    )


@pytest.fixture
def transactions() -> list[Transaction]:
    return [
        _tx("1", "100.00", "Food & Dining", days_ago=0),
        _tx("2", "50.50", "Transport", days_ago=1),
        _tx("3", "25.25", "Food & Dining", status="pending", days_ago=2),
        _tx("4", "999.00", "Shopping", status="rejected", days_ago=0),
        _tx("5", "5000.00", "Salary", type_="income", days_ago=10),
    ]


def test_rejected_transactions_are_excluded(transactions):
    aggregator = TransactionAggregator(transactions)

    assert {t.id for t in aggregator.transactions} == {"1", "2", "3", "5"}


def test_total_by_type(transactions):
    aggregator = TransactionAggregator(transactions)

    assert aggregator.total_by_type("expense") == Decimal("175.75")
    assert aggregator.total_by_type("income") == Decimal("5000.00")


def test_category_totals_sum_to_type_total(transactions):
    aggregator = TransactionAggregator(transactions)

    totals = aggregator.category_totals("expense")

    assert totals == {"Food & Dining": Decimal("125.25"), "Transport": Decimal("50.50")}
    assert sum(totals.values()) == aggregator.total_by_type("expense")


def test_by_category_groups_items(transactions):
    groups = TransactionAggregator(transactions).by_category("expense")

    assert sorted(t.id for t in groups["Food & Dining"]) == ["1", "3"]


def test_recent_is_newest_first(transactions):
    recent = TransactionAggregator(transactions).recent(3)

    assert [t.id for t in recent] == ["1", "2", "3"]


def test_recent_with_zero_limit(transactions):
    assert TransactionAggregator(transactions).recent(0) == []


def test_in_window_is_half_open(transactions):
    aggregator = TransactionAggregator(transactions)

    window = aggregator.in_window(NOW - timedelta(days=2), NOW)

    assert {t.id for t in window.transactions} == {"2", "3"}


def test_daily_totals_zero_filled(transactions):
    daily = TransactionAggregator(transactions).daily_totals("expense", days=3, now=NOW)

    assert daily == [
        (date(2024, 10, 22), Decimal("25.25")),
        (date(2024, 10, 23), Decimal("50.50")),
        (date(2024, 10, 24), Decimal("100.00")),
    ]


def test_unparseable_amount_counts_as_zero():
    bad = Transaction.model_construct(
        id="x",
        merchant="Broken",
        amount="n/a",
        category="Others",
        type="expense",
        status="completed",
        occurred_at=NOW,
    )

    assert TransactionAggregator([bad]).total_by_type("expense") == Decimal("0")


def test_summary(transactions):
    summary = TransactionAggregator(transactions).summary(days=3, now=NOW, recent_limit=2)

    assert summary.expense_total == "175.75"
    assert summary.income_total == "5000.00"
    assert summary.net == "4824.25"
    assert [c.category for c in summary.by_category] == ["Food & Dining", "Transport"]
    assert [d.total for d in summary.daily] == ["25.25", "50.50", "100.00"]
    assert [t.id for t in summary.recent] == ["1", "2"]
    assert summary.count == 4


def test_summary_is_repeatable(transactions):
    aggregator = TransactionAggregator(transactions)

    first = aggregator.summary(now=NOW)
    second = aggregator.summary(now=NOW)

    assert first == second
