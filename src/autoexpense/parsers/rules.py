"""Named extraction rules for transaction alerts.

Each rule knows when it applies to a message and how to pull out the amount,
merchant and payment instrument. Rules never raise on odd input; a rule that
cannot find an amount reports ``Confidence.NONE`` and leaves the decision to
the parser.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass

from autoexpense.core.money import format_amount
from autoexpense.schemas.internal import Confidence

MERCHANT_MAX_LENGTH = 30
MERCHANT_MIN_LENGTH = 3
UNKNOWN_MERCHANT = "Unknown"

_NUMBER = r"(\d+(?:,\d+)*(?:\.\d{1,2})?)"
_CURRENCY = r"(?:\brs\.?|\binr|₹|\$|\busd)"

# A run of capitalized words, e.g. "WHOLEFDS MRKT" or "Ramesh Kumar".
_CAPITALIZED_RUN = r"([A-Z][A-Za-z0-9&.'-]*(?:[ \t]+[A-Z][A-Za-z0-9&.'-]*)*)"

CURRENCY_AMOUNT = re.compile(_CURRENCY + r"\s*" + _NUMBER, re.IGNORECASE)
CURRENCY_OR_PAID_AMOUNT = re.compile(
    r"(?:" + _CURRENCY + r"|\bpaid\b)\s*:?\s*" + _CURRENCY + r"?\s*" + _NUMBER, re.IGNORECASE
)

CARD = re.compile(
    r"\b(visa|mastercard|rupay|amex|diners)\s*(?:credit|debit)?\s*card\s*"
    r"(?:ending(?:\s+in)?|xx+|x+)?\s*(\d{4})\b",
    re.IGNORECASE,
)
BARE_CARD = re.compile(r"\bcard\s*(?:ending(?:\s+in)?|xx+)\s*(\d{4})\b", re.IGNORECASE)

CARD_NETWORKS = {
    "visa": "Visa",
    "mastercard": "Mastercard",
    "rupay": "RuPay",
    "amex": "Amex",
    "diners": "Diners",
}

_MERCHANT_END = r"(?=\s+(?:on|via|using|through|for|ref|from)\b|\s*[.,;\n]|\s*$)"
PAID_TO = re.compile(r"(?i:\bpaid\s+to)\s+([A-Za-z][A-Za-z0-9&.' -]*?)" + _MERCHANT_END)
AFTER_VPA = re.compile(r"[\w.\-]+@[\w.\-]+\s*[(\-:]?\s*" + _CAPITALIZED_RUN)
AFTER_TO = re.compile(r"(?i:\bto)\s+" + _CAPITALIZED_RUN)
AFTER_TO_OR_AT = re.compile(r"(?i:\b(?:to|at))\s+" + _CAPITALIZED_RUN)
SENDER_DISPLAY_NAME = re.compile(r"^\s*\"?([^<\"]+)\"?\s*<")


@dataclass
class RuleMatch:
    """What one rule extracted from a message."""

    rule: str
    amount: str | None
    merchant: str
    payment_method: str
    confidence: Confidence

    @property
    def has_amount(self) -> bool:
        return self.amount is not None


def clean_merchant(raw: str | None) -> str | None:
    """Normalize an extracted merchant name.

    Collapses whitespace, drops unexpected characters and caps the length.
    Returns None when fewer than three characters survive.
    """
    if not raw:
        return None
    merchant = re.sub(r"\s+", " ", raw).strip()
    merchant = re.sub(r"[^A-Za-z0-9 &.'-]", "", merchant)
    merchant = merchant[:MERCHANT_MAX_LENGTH].strip()
    if len(merchant) < MERCHANT_MIN_LENGTH:
        return None
    return merchant


def sender_name(from_header: str | None) -> str | None:
    """Human-readable part of a From header ("HDFC Bank <alerts@..>" -> "HDFC Bank")."""
    if not from_header:
        return None
    match = SENDER_DISPLAY_NAME.match(from_header)
    name = match.group(1) if match else from_header
    return name.strip() or None


def find_amount(pattern: re.Pattern[str], text: str) -> str | None:
    match = pattern.search(text)
    if not match:
        return None
    try:
        return format_amount(match.group(match.lastindex))
    except ValueError:
        return None


def find_instrument(text: str, default: str) -> str:
    match = CARD.search(text)
    if match:
        return f"{CARD_NETWORKS[match.group(1).lower()]} Card ending {match.group(2)}"
    match = BARE_CARD.search(text)
    if match:
        return f"Card ending {match.group(1)}"
    return default


def _first_merchant(text: str, patterns: list[re.Pattern[str]]) -> str | None:
    for pattern in patterns:
        for match in pattern.finditer(text):
            merchant = clean_merchant(match.group(1))
            if merchant:
                return merchant
    return None


class ExtractionRule(ABC):
    """A named way of reading one family of transaction alerts."""

    name: str
    default_instrument: str
    amount_pattern: re.Pattern[str]
    merchant_patterns: list[re.Pattern[str]]

    @abstractmethod
    def applies(self, text: str) -> bool:
        """Whether this rule family covers the message."""

    def extract(self, text: str, sender: str | None = None) -> RuleMatch:
        """Extract fields from subject+body text.

        Args:
            text: Subject and decoded body joined by a space
            sender: Raw From header, used as the merchant of last resort

        Returns:
            RuleMatch whose confidence is HIGH when amount and merchant were
            found in the text, LOW when the merchant came from the sender or
            is unknown, and NONE when no amount was found
        """
        amount = find_amount(self.amount_pattern, text)
        merchant = _first_merchant(text, self.merchant_patterns)
        confidence = Confidence.HIGH
        if merchant is None:
            merchant = clean_merchant(sender_name(sender)) or UNKNOWN_MERCHANT
            confidence = Confidence.LOW
        if amount is None:
            confidence = Confidence.NONE

        return RuleMatch(
            rule=self.name,
            amount=amount,
            merchant=merchant,
            payment_method=find_instrument(text, self.default_instrument),
            confidence=confidence,
        )


class UpiRule(ExtractionRule):
    """Peer-to-peer instant payments (UPI and VPA-addressed transfers)."""

    name = "upi"
    default_instrument = "UPI"
    amount_pattern = CURRENCY_OR_PAID_AMOUNT
    merchant_patterns = [PAID_TO, AFTER_VPA, AFTER_TO]

    _trigger = re.compile(r"\bupi\b|\bvpa\b|\bpaid\s+to\b", re.IGNORECASE)

    def applies(self, text: str) -> bool:
        return bool(self._trigger.search(text))


class BankDebitRule(ExtractionRule):
    """Generic bank and card debit alerts; covers anything not matched earlier."""

    name = "bank_debit"
    default_instrument = "Unknown"
    amount_pattern = CURRENCY_AMOUNT
    merchant_patterns = [AFTER_TO_OR_AT]

    def applies(self, text: str) -> bool:
        return True


DEFAULT_RULES: list[ExtractionRule] = [UpiRule(), BankDebitRule()]
