"""Totals and breakdowns over a transaction list.

Every view excludes rejected transactions. Nothing here touches storage, so
calling any method repeatedly gives the same answer.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from autoexpense.core.money import TWO_PLACES, safe_amount
from autoexpense.schemas.transaction import (
    CategoryTotal,
    DailyTotal,
    Transaction,
    TransactionStatus,
    TransactionSummary,
    TransactionType,
)


def _fmt(value: Decimal) -> str:
    return str(value.quantize(TWO_PLACES))


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


class TransactionAggregator:
    """Read-only aggregate views over a snapshot of transactions."""

    def __init__(self, transactions: list[Transaction]):
        self.transactions = [t for t in transactions if t.status != TransactionStatus.REJECTED]

    def total_by_type(self, type_: TransactionType | str) -> Decimal:
        type_ = TransactionType(type_).value
        return sum((safe_amount(t.amount) for t in self.transactions if t.type == type_), Decimal("0"))

    def by_category(self, type_: TransactionType | str) -> dict[str, list[Transaction]]:
        type_ = TransactionType(type_).value
        groups: dict[str, list[Transaction]] = defaultdict(list)
        for t in self.transactions:
            if t.type == type_:
                groups[t.category].append(t)
        return dict(groups)

    def category_totals(self, type_: TransactionType | str) -> dict[str, Decimal]:
        return {
            category: sum((safe_amount(t.amount) for t in items), Decimal("0"))
            for category, items in self.by_category(type_).items()
        }

    def recent(self, n: int = 5) -> list[Transaction]:
        """The ``n`` most recent transactions by occurred_at, newest first."""
        ordered = sorted(self.transactions, key=lambda t: _aware(t.occurred_at), reverse=True)
        return ordered[: max(n, 0)]

    def in_window(self, start: datetime | None = None, end: datetime | None = None) -> "TransactionAggregator":
        """Aggregator restricted to ``start <= occurred_at < end``."""
        start = _aware(start) if start else None
        end = _aware(end) if end else None
        return TransactionAggregator(
            [
                t
                for t in self.transactions
                if (start is None or _aware(t.occurred_at) >= start)
                and (end is None or _aware(t.occurred_at) < end)
            ]
        )

    def daily_totals(
        self,
        type_: TransactionType | str = TransactionType.EXPENSE,
        days: int = 7,
        now: datetime | None = None,
    ) -> list[tuple[date, Decimal]]:
        """Per-day totals for the last ``days`` days (UTC), oldest first, zero-filled."""
        type_ = TransactionType(type_).value
        today = _aware(now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()
        buckets = {today - timedelta(days=offset): Decimal("0") for offset in range(days - 1, -1, -1)}
        for t in self.transactions:
            if t.type != type_:
                continue
            day = _aware(t.occurred_at).astimezone(timezone.utc).date()
            if day in buckets:
                buckets[day] += safe_amount(t.amount)
        return list(buckets.items())

    def summary(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
        days: int = 7,
        now: datetime | None = None,
        recent_limit: int = 5,
    ) -> TransactionSummary:
        window = self.in_window(start, end)
        expense = window.total_by_type(TransactionType.EXPENSE)
        income = window.total_by_type(TransactionType.INCOME)
        return TransactionSummary(
            start=start,
            end=end,
            expense_total=_fmt(expense),
            income_total=_fmt(income),
            net=_fmt(income - expense),
            by_category=[
                CategoryTotal(category=category, total=_fmt(total))
                for category, total in sorted(
                    window.category_totals(TransactionType.EXPENSE).items(),
                    key=lambda item: item[1],
                    reverse=True,
                )
            ],
            daily=[
                DailyTotal(day=day.isoformat(), total=_fmt(total))
                for day, total in window.daily_totals(TransactionType.EXPENSE, days, now)
            ],
            recent=window.recent(recent_limit),
            count=len(window.transactions),
        )
