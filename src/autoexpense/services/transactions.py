"""Transaction service for user-entered transactions."""

import logging
from datetime import datetime, timezone

from autoexpense.core.exceptions import TransactionNotFoundError
from autoexpense.core.ids import new_stamp
from autoexpense.schemas.transaction import (
    Transaction,
    TransactionCreate,
    TransactionStatus,
    TransactionUpdate,
)
from autoexpense.storage.collections import Collection
from autoexpense.storage.router import StorageRouter

logger = logging.getLogger(__name__)


class TransactionService:
    """Service layer for listing and editing transactions."""

    def __init__(self, router: StorageRouter):
        """Initialize transaction service.

        Args:
            router: Storage router for the configured backend
        """
        self.router = router

    async def list(
        self,
        include_rejected: bool = False,
        status: TransactionStatus | None = None,
    ) -> list[Transaction]:
        """List transactions, newest first.

        Args:
            include_rejected: Include rejected transactions (hidden by default)
            status: Only return transactions with this status

        Returns:
            Transactions sorted by occurred_at descending
        """
        transactions = await self.router.load(Collection.TRANSACTIONS)
        if status is not None:
            transactions = [t for t in transactions if t.status == status]
        elif not include_rejected:
            transactions = [t for t in transactions if t.status != TransactionStatus.REJECTED]
        return sorted(transactions, key=lambda t: t.occurred_at, reverse=True)

    async def get(self, transaction_id: str) -> Transaction:
        """Get a transaction by id.

        Raises:
            TransactionNotFoundError: Unknown id
        """
        for transaction in await self.router.load(Collection.TRANSACTIONS):
            if transaction.id == transaction_id:
                return transaction
        raise TransactionNotFoundError(details={"transaction_id": transaction_id})

    async def add(self, data: TransactionCreate) -> Transaction:
        """Store a manually entered transaction as completed.

        Args:
            data: Validated entry

        Returns:
            The stored transaction with its creation-time id
        """
        transaction_id, created_at = new_stamp()
        transaction = Transaction(
            id=transaction_id,
            created_at=created_at,
            status=TransactionStatus.COMPLETED,
            occurred_at=data.occurred_at or datetime.now(timezone.utc),
            **data.model_dump(exclude={"occurred_at"}),
        )
        await self.router.add(Collection.TRANSACTIONS, transaction)
        logger.info("Transaction added", extra={"transaction_id": transaction.id})
        return transaction

    async def update(self, transaction_id: str, data: TransactionUpdate) -> Transaction:
        """Apply a partial update.

        Raises:
            TransactionNotFoundError: Unknown id
        """
        current = await self.get(transaction_id)
        updated = Transaction.model_validate(
            {**current.model_dump(), **data.model_dump(exclude_unset=True, exclude_none=True)}
        )
        if not await self.router.replace(Collection.TRANSACTIONS, transaction_id, updated):
            raise TransactionNotFoundError(details={"transaction_id": transaction_id})
        logger.info("Transaction updated", extra={"transaction_id": transaction_id})
        return updated

    async def delete(self, transaction_id: str) -> None:
        """Remove a transaction from the active store.

        Raises:
            TransactionNotFoundError: Unknown id
        """
        if not await self.router.delete_by_id(Collection.TRANSACTIONS, transaction_id):
            raise TransactionNotFoundError(details={"transaction_id": transaction_id})
        logger.info("Transaction deleted", extra={"transaction_id": transaction_id})
