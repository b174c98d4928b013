"""Mailbox-to-storage ingestion pipeline."""

import logging

from autoexpense.core.exceptions import AutoExpenseError
from autoexpense.mailbox.retriever import MessageRetriever
from autoexpense.parsers.transaction_parser import TransactionParser
from autoexpense.schemas.review import IngestionResult
from autoexpense.services.dedup import DedupGuard
from autoexpense.services.review import SenderApprovalGate
from autoexpense.storage.collections import Collection
from autoexpense.storage.router import StorageRouter

logger = logging.getLogger(__name__)


class IngestionService:
    """Runs one pass of retrieve -> parse -> dedup -> route.

    A failure to store one candidate is logged and counted; the rest of the
    batch is still processed.
    """

    def __init__(
        self,
        router: StorageRouter,
        retriever: MessageRetriever,
        parser: TransactionParser | None = None,
        gate: SenderApprovalGate | None = None,
        enabled: bool = True,
    ):
        self.router = router
        self.retriever = retriever
        self.parser = parser or TransactionParser()
        self.gate = gate or SenderApprovalGate(router)
        self.enabled = enabled

    async def run(self) -> IngestionResult:
        result = IngestionResult()
        if not self.enabled:
            logger.info("Auto-parsing disabled, skipping ingestion")
            return result

        messages = await self.retriever.fetch_candidate_messages()
        result.fetched = len(messages)
        if not messages:
            return result

        guard = DedupGuard(await self.router.load(Collection.TRANSACTIONS))
        for message in messages:
            candidate = self.parser.parse(message)
            if candidate is None:
                continue
            result.parsed += 1

            if guard.is_duplicate(candidate):
                result.duplicates += 1
                logger.debug("Duplicate candidate skipped", extra={"message_id": message.id})
                continue

            try:
                decision = await self.gate.route(candidate)
            except AutoExpenseError as e:
                result.failed += 1
                logger.error(
                    "Failed to store candidate",
                    extra={"message_id": message.id, "error_code": e.error_code},
                )
                continue

            guard.remember(candidate)
            if decision.auto_filed is not None:
                result.auto_filed += 1
            else:
                result.pending_review += 1

        logger.info("Ingestion run complete", extra=result.model_dump())
        return result
