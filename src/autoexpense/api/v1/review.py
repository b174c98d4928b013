"""Manual review queue endpoints."""

from fastapi import APIRouter, Depends

from autoexpense.api.deps import get_review_gate
from autoexpense.schemas.review import ApproveRequest, ReviewEdits
from autoexpense.schemas.transaction import Transaction
from autoexpense.services.review import SenderApprovalGate

router = APIRouter(prefix="/review", tags=["review"])


@router.get("/pending", response_model=list[Transaction], summary="Pending transactions, oldest first")
async def list_pending(gate: SenderApprovalGate = Depends(get_review_gate)) -> list[Transaction]:
    return await gate.pending()


@router.post("/{transaction_id}/approve", response_model=Transaction)
async def approve_transaction(
    transaction_id: str,
    data: ApproveRequest | None = None,
    gate: SenderApprovalGate = Depends(get_review_gate),
) -> Transaction:
    data = data or ApproveRequest()
    edits = ReviewEdits.model_validate(data.model_dump(exclude={"remember_sender"}))
    return await gate.approve(transaction_id, edits, remember_sender=data.remember_sender)


@router.post("/{transaction_id}/reject", response_model=Transaction)
async def reject_transaction(
    transaction_id: str,
    gate: SenderApprovalGate = Depends(get_review_gate),
) -> Transaction:
    return await gate.reject(transaction_id)
