"""Sender approval gate and the manual review queue."""

import logging

from autoexpense.core.exceptions import ReviewStateError, TransactionNotFoundError
from autoexpense.core.ids import new_stamp
from autoexpense.schemas.internal import Confidence, ParsedTransaction
from autoexpense.schemas.reference import ApprovedSender
from autoexpense.schemas.review import ReviewEdits, RoutingDecision
from autoexpense.schemas.transaction import Transaction, TransactionStatus, TransactionType
from autoexpense.services.reference import OTHER_PAYMENT_METHOD, ReferenceService
from autoexpense.storage.collections import Collection
from autoexpense.storage.router import StorageRouter

logger = logging.getLogger(__name__)

AUTO_FILED_NOTE = "Email Automated"


class SenderApprovalGate:
    """Routes candidates to storage or to manual review.

    Candidates from an approved sender are filed as completed expenses with
    the remembered category. Everything else, including any candidate whose
    amount could not be parsed, is stored as pending until a reviewer
    approves or rejects it. Approving can promote the sender so later
    candidates skip review.
    """

    def __init__(self, router: StorageRouter, reference: ReferenceService | None = None):
        self.router = router
        self.reference = reference or ReferenceService(router)

    async def route(self, candidate: ParsedTransaction) -> RoutingDecision:
        """Persist a candidate as auto-filed or pending.

        Args:
            candidate: Parsed, non-duplicate candidate

        Returns:
            RoutingDecision with either ``auto_filed`` or ``pending_review`` set

        Raises:
            RemoteStoreError: If the remote store rejects the write
        """
        approved = await self.reference.find_approved_sender(candidate.sender)
        if approved is not None and candidate.confidence != Confidence.NONE:
            transaction = self._to_transaction(
                candidate,
                status=TransactionStatus.COMPLETED,
                category=approved.category or candidate.category,
                payment_method=await self._payment_method_for(approved, candidate),
                notes=AUTO_FILED_NOTE,
            )
            await self.router.add(Collection.TRANSACTIONS, transaction)
            logger.info(
                "Auto-filed transaction",
                extra={"transaction_id": transaction.id, "rule": candidate.rule},
            )
            return RoutingDecision(auto_filed=transaction)

        transaction = self._to_transaction(
            candidate,
            status=TransactionStatus.PENDING,
            category=candidate.category,
            payment_method=candidate.payment_method,
            notes=None,
        )
        await self.router.add(Collection.TRANSACTIONS, transaction)
        logger.info(
            "Queued transaction for review",
            extra={
                "transaction_id": transaction.id,
                "confidence": candidate.confidence.value,
                "approved_sender": approved is not None,
            },
        )
        return RoutingDecision(pending_review=transaction)

    async def _payment_method_for(self, approved: ApprovedSender, candidate: ParsedTransaction) -> str:
        choice = approved.payment_method or candidate.payment_method
        if choice and choice in await self.reference.payment_method_names():
            return choice
        return OTHER_PAYMENT_METHOD

    @staticmethod
    def _to_transaction(
        candidate: ParsedTransaction,
        status: TransactionStatus,
        category: str,
        payment_method: str | None,
        notes: str | None,
    ) -> Transaction:
        transaction_id, created_at = new_stamp()
        return Transaction(
            id=transaction_id,
            merchant=candidate.merchant,
            amount=candidate.amount,
            category=category,
            payment_method=payment_method,
            occurred_at=candidate.occurred_at,
            type=TransactionType.EXPENSE,
            status=status,
            notes=notes,
            raw_message=candidate.message,
            sender=candidate.sender,
            created_at=created_at,
        )

    async def pending(self) -> list[Transaction]:
        """Re-read storage and return pending transactions, oldest first."""
        transactions = await self.router.load(Collection.TRANSACTIONS)
        queue = [t for t in transactions if t.status == TransactionStatus.PENDING]
        return sorted(queue, key=lambda t: t.occurred_at)

    async def _get_pending(self, transaction_id: str) -> Transaction:
        for transaction in await self.router.load(Collection.TRANSACTIONS):
            if transaction.id == transaction_id:
                if transaction.status != TransactionStatus.PENDING:
                    raise ReviewStateError(
                        details={"transaction_id": transaction_id, "status": transaction.status}
                    )
                return transaction
        raise TransactionNotFoundError(details={"transaction_id": transaction_id})

    async def approve(
        self,
        transaction_id: str,
        edits: ReviewEdits | None = None,
        remember_sender: bool = True,
    ) -> Transaction:
        """Mark a pending transaction completed.

        Args:
            transaction_id: Id of a pending transaction
            edits: Optional corrections applied before completing
            remember_sender: Add the sender to approved senders, using the
                final category and payment method

        Returns:
            The completed transaction

        Raises:
            TransactionNotFoundError: Unknown id
            ReviewStateError: Transaction is not pending
        """
        transaction = await self._get_pending(transaction_id)
        changes = edits.model_dump(exclude_none=True) if edits else {}
        changes["status"] = TransactionStatus.COMPLETED
        approved = Transaction.model_validate({**transaction.model_dump(), **changes})

        await self.router.replace(Collection.TRANSACTIONS, transaction_id, approved)
        if remember_sender and approved.sender:
            await self.reference.remember_sender(
                ApprovedSender(
                    sender=approved.sender,
                    payment_method=approved.payment_method,
                    category=approved.category,
                )
            )
        logger.info("Transaction approved", extra={"transaction_id": transaction_id})
        return approved

    async def reject(self, transaction_id: str) -> Transaction:
        """Mark a pending transaction rejected; it stays in storage."""
        transaction = await self._get_pending(transaction_id)
        rejected = Transaction.model_validate(
            {**transaction.model_dump(), "status": TransactionStatus.REJECTED}
        )
        await self.router.replace(Collection.TRANSACTIONS, transaction_id, rejected)
        logger.info("Transaction rejected", extra={"transaction_id": transaction_id})
        return rejected
