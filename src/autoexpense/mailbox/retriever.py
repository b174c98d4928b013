"""Candidate message retrieval from the mailbox."""

import base64
import binascii
import calendar
import logging
from datetime import date, datetime, timezone
from typing import Any

import httpx

from autoexpense.core.exceptions import RemoteStoreError, SessionExpiredError
from autoexpense.mailbox.gmail import GmailClient
from autoexpense.mailbox.keywords import DEFAULT_KEYWORDS, KeywordStore
from autoexpense.schemas.internal import RawMessage

logger = logging.getLogger(__name__)


def months_before(day: date, months: int) -> date:
    """Same calendar day ``months`` earlier, clamped to the month's end."""
    year, month = divmod(day.year * 12 + day.month - 1 - months, 12)
    month += 1
    return date(year, month, min(day.day, calendar.monthrange(year, month)[1]))


def build_query(keywords: list[str], since: date) -> str:
    """Gmail query: any keyword, received after ``since``."""
    terms = [f'"{k}"' if " " in k else k for k in keywords]
    return f"({' OR '.join(terms)}) after:{since.strftime('%Y/%m/%d')}"


def decode_body(data: str) -> str:
    """Decode a base64url Gmail body part."""
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded).decode("utf-8", errors="replace")


def _find_text_part(part: dict[str, Any]) -> str | None:
    if part.get("mimeType") == "text/plain" and part.get("body", {}).get("data"):
        return part["body"]["data"]
    for child in part.get("parts", []) or []:
        found = _find_text_part(child)
        if found:
            return found
    return None


def decode_message(data: dict[str, Any]) -> RawMessage | None:
    """Convert a Gmail message resource to a RawMessage.

    The body is the flat payload body when present, otherwise the first
    text/plain part; the snippet is used when neither decodes.
    """
    payload = data.get("payload")
    if not data.get("id") or not isinstance(payload, dict):
        return None

    headers = {h.get("name", "").lower(): h.get("value", "") for h in payload.get("headers", [])}
    body = data.get("snippet", "") or ""
    encoded = payload.get("body", {}).get("data") or _find_text_part(payload)
    if encoded:
        try:
            body = decode_body(encoded)
        except (binascii.Error, ValueError):
            logger.debug("Body decode failed, using snippet", extra={"message_id": data["id"]})

    return RawMessage(
        id=data["id"],
        sender=headers.get("from", ""),
        subject=headers.get("subject", ""),
        date=headers.get("date", ""),
        body=body,
    )


class MessageRetriever:
    """Fetches recent messages that may be transaction alerts.

    Safe to call opportunistically: every failure is logged and turned into
    an empty result. An expired session is refreshed silently exactly once.
    """

    def __init__(
        self,
        client: GmailClient | None,
        keyword_store: KeywordStore,
        search_limit: int = 10,
        fetch_limit: int = 5,
        lookback_months: int = 1,
    ):
        self.client = client
        self.keyword_store = keyword_store
        self.search_limit = search_limit
        self.fetch_limit = fetch_limit
        self.lookback_months = lookback_months

    async def fetch_candidate_messages(
        self,
        keywords: set[str] | None = None,
        lookback_months: int | None = None,
        now: datetime | None = None,
    ) -> list[RawMessage]:
        """Search the mailbox and return decoded candidate messages.

        Args:
            keywords: Extra search terms; the stored keyword list is used when omitted
            lookback_months: Override of the configured lookback window
            now: Reference time for the lookback window

        Returns:
            Up to ``fetch_limit`` messages; empty on any failure
        """
        if self.client is None:
            logger.info("Mailbox not connected, skipping retrieval")
            return []

        try:
            try:
                await self.keyword_store.merge_defaults()
            except RemoteStoreError:
                logger.warning("Keyword list unavailable, default keywords not merged")
            terms = list(keywords) if keywords else await self.keyword_store.keyword_texts()
            known = {t.lower() for t in terms}
            terms += [k for k in DEFAULT_KEYWORDS if k.lower() not in known]

            now = now or datetime.now(timezone.utc)
            since = months_before(now.date(), lookback_months or self.lookback_months)
            query = build_query(terms, since)

            try:
                return await self._fetch(query)
            except SessionExpiredError:
                logger.info("Mailbox session expired, refreshing once")
                await self.client.token_provider.refresh()
                return await self._fetch(query)
        except Exception as e:
            logger.warning("Message retrieval failed", extra={"error_type": type(e).__name__})
            return []

    async def _fetch(self, query: str) -> list[RawMessage]:
        ids = await self.client.search(query, max_results=self.search_limit)
        logger.info("Mailbox search complete", extra={"found": len(ids)})

        messages: list[RawMessage] = []
        for message_id in ids[: self.fetch_limit]:
            try:
                message = decode_message(await self.client.get_message(message_id))
            except SessionExpiredError:
                raise
            except (httpx.HTTPError, ValueError, KeyError) as e:
                logger.warning(
                    "Message fetch failed",
                    extra={"message_id": message_id, "error_type": type(e).__name__},
                )
                continue
            if message is not None:
                messages.append(message)
        return messages
