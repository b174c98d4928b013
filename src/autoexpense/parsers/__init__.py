"""Transaction alert parsing.

Rule-based extraction of amount, merchant and payment instrument from
retrieved messages:
- UpiRule handles instant-payment alerts
- BankDebitRule handles generic bank and card debits
"""

from autoexpense.parsers.rules import BankDebitRule, ExtractionRule, RuleMatch, UpiRule
from autoexpense.parsers.transaction_parser import TransactionParser

__all__ = [
    "BankDebitRule",
    "ExtractionRule",
    "RuleMatch",
    "TransactionParser",
    "UpiRule",
]
