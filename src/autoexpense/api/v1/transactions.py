"""Transaction endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status

from autoexpense.api.deps import get_transaction_service
from autoexpense.schemas.transaction import (
    Transaction,
    TransactionCreate,
    TransactionStatus,
    TransactionSummary,
    TransactionUpdate,
)
from autoexpense.services.aggregator import TransactionAggregator
from autoexpense.services.transactions import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get(
    "",
    response_model=list[Transaction],
    summary="List transactions",
    description="""
    List stored transactions, newest first.

    Rejected transactions are hidden unless **include_rejected** is set;
    **status** narrows the list to one status.
    """,
)
async def list_transactions(
    include_rejected: bool = Query(False),
    status_filter: TransactionStatus | None = Query(None, alias="status"),
    service: TransactionService = Depends(get_transaction_service),
) -> list[Transaction]:
    return await service.list(include_rejected=include_rejected, status=status_filter)


@router.get(
    "/summary",
    response_model=TransactionSummary,
    summary="Totals and breakdowns",
)
async def transaction_summary(
    start: datetime | None = Query(None, description="Inclusive lower bound on occurred_at"),
    end: datetime | None = Query(None, description="Exclusive upper bound on occurred_at"),
    days: int = Query(7, ge=1, le=90, description="Days in the spending trend"),
    recent: int = Query(5, ge=0, le=50),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionSummary:
    transactions = await service.list(include_rejected=True)
    return TransactionAggregator(transactions).summary(
        start=start, end=end, days=days, recent_limit=recent
    )


@router.post("", response_model=Transaction, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    data: TransactionCreate,
    service: TransactionService = Depends(get_transaction_service),
) -> Transaction:
    return await service.add(data)


@router.get("/{transaction_id}", response_model=Transaction)
async def get_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
) -> Transaction:
    return await service.get(transaction_id)


@router.patch("/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: str,
    data: TransactionUpdate,
    service: TransactionService = Depends(get_transaction_service),
) -> Transaction:
    return await service.update(transaction_id, data)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
) -> Response:
    await service.delete(transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
