"""Turns a retrieved message into a candidate transaction."""

import logging
import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

from autoexpense.categorization import categorize
from autoexpense.schemas.internal import Confidence, ParsedTransaction, RawMessage
from autoexpense.parsers.rules import DEFAULT_RULES, ExtractionRule, RuleMatch

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 500
UNKNOWN_AMOUNT = "0.00"

TRANSACTION_SNIFF = re.compile(
    r"\b(debit(?:ed)?|credit(?:ed)?|paid|received|spent|transaction|payment|upi|"
    r"transfer|purchase|charged)\b",
    re.IGNORECASE,
)


def message_date(date_header: str | None, now: datetime | None = None) -> datetime:
    """Parse an RFC 2822 Date header, falling back to ``now``."""
    now = now or datetime.now(timezone.utc)
    if not date_header:
        return now
    try:
        parsed = parsedate_to_datetime(date_header)
    except (TypeError, ValueError, IndexError):
        logger.debug("Unparseable Date header, using current time")
        return now
    if parsed is None:
        return now
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def time_ago(moment: datetime, now: datetime | None = None) -> str:
    """Short relative label: "5m ago", "3h ago", "2d ago"."""
    now = now or datetime.now(timezone.utc)
    seconds = max(int((now - moment).total_seconds()), 0)
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = seconds // 3600
    if hours < 24:
        return f"{hours}h ago"
    return f"{seconds // 86400}d ago"


class TransactionParser:
    """Best-effort parser over an ordered list of extraction rules.

    Messages that do not look transactional yield None. Everything else yields
    a candidate: the first applicable rule that finds an amount wins, and when
    none does the first applicable rule's result is kept with amount "0.00"
    and ``Confidence.NONE`` so the message still reaches manual review.

    Example:
        >>> parser = TransactionParser()
        >>> candidate = parser.parse(message)
        >>> candidate.amount, candidate.confidence
        ('14.50', <Confidence.HIGH: 'high'>)
    """

    def __init__(self, rules: list[ExtractionRule] | None = None):
        self.rules = rules if rules is not None else list(DEFAULT_RULES)

    def select(self, text: str, sender: str | None) -> RuleMatch | None:
        fallback: RuleMatch | None = None
        for rule in self.rules:
            if not rule.applies(text):
                continue
            match = rule.extract(text, sender)
            if match.has_amount:
                return match
            if fallback is None:
                fallback = match
        return fallback

    def parse(self, message: RawMessage, now: datetime | None = None) -> ParsedTransaction | None:
        """Parse one message.

        Args:
            message: Retrieved message with decoded body
            now: Reference time for the relative label (default: current time)

        Returns:
            ParsedTransaction, or None if the message is not a transaction alert
        """
        text = f"{message.subject} {message.body}".strip()
        if not TRANSACTION_SNIFF.search(text):
            return None

        match = self.select(text, message.sender)
        if match is None:
            return None

        now = now or datetime.now(timezone.utc)
        occurred_at = message_date(message.date, now)
        confidence = match.confidence if match.has_amount else Confidence.NONE

        logger.debug(
            "Parsed message",
            extra={"message_id": message.id, "rule": match.rule, "confidence": confidence.value},
        )
        return ParsedTransaction(
            message_id=message.id,
            sender=message.sender,
            subject=message.subject,
            occurred_at=occurred_at,
            time_label=time_ago(occurred_at, now),
            message=message.body[:MESSAGE_PREVIEW_LENGTH],
            merchant=match.merchant,
            amount=match.amount or UNKNOWN_AMOUNT,
            category=categorize(match.merchant, text),
            payment_method=match.payment_method,
            rule=match.rule,
            confidence=confidence,
        )
