"""Mailbox access: search keywords, Gmail client and message retrieval."""

from autoexpense.mailbox.gmail import GmailClient
from autoexpense.mailbox.keywords import DEFAULT_KEYWORDS, KeywordStore
from autoexpense.mailbox.retriever import MessageRetriever

__all__ = ["DEFAULT_KEYWORDS", "GmailClient", "KeywordStore", "MessageRetriever"]
