"""Duplicate detection for parsed candidates."""

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol


class _Comparable(Protocol):
    merchant: str
    amount: str
    occurred_at: datetime


def dedup_key(item: _Comparable) -> tuple[str, str, datetime]:
    return (item.merchant, item.amount, item.occurred_at)


def is_duplicate(candidate: _Comparable, existing: Iterable[_Comparable]) -> bool:
    """True iff some stored item has the same merchant, amount and date.

    Comparison is exact: "14.50" and "14.5" are different amounts.
    """
    key = dedup_key(candidate)
    return any(dedup_key(item) == key for item in existing)


class DedupGuard:
    """Exact-match duplicate check over a snapshot of stored transactions.

    ``remember`` adds items filed during the current run so two identical
    messages in one batch are not both filed.
    """

    def __init__(self, existing: Iterable[_Comparable] = ()):
        self._seen: set[tuple[str, str, datetime]] = {dedup_key(item) for item in existing}

    def is_duplicate(self, candidate: _Comparable) -> bool:
        return dedup_key(candidate) in self._seen

    def remember(self, item: _Comparable) -> None:
        self._seen.add(dedup_key(item))
