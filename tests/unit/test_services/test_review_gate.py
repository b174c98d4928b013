"""Unit tests for SenderApprovalGate on the local store."""

from datetime import datetime, timedelta, timezone

import pytest

from autoexpense.core.exceptions import ReviewStateError, TransactionNotFoundError
from autoexpense.schemas.internal import Confidence, ParsedTransaction
from autoexpense.schemas.reference import ApprovedSender
from autoexpense.schemas.review import ReviewEdits
from autoexpense.services.reference import ReferenceService
from autoexpense.services.review import AUTO_FILED_NOTE, SenderApprovalGate
from autoexpense.storage.collections import Collection

SENDER = "alerts@hdfcbank.net"
WHEN = datetime(2024, 10, 24, 11, 30, tzinfo=timezone.utc)


def _candidate(
    amount: str = "14.50",
    confidence: Confidence = Confidence.HIGH,
    payment_method: str = "Unknown",
    sender: str = SENDER,
    occurred_at: datetime = WHEN,
) -> ParsedTransaction:
    return ParsedTransaction(
        message_id="m1",
        sender=sender,
        subject="Debit alert",
        occurred_at=occurred_at,
        message="Debit: $14.50 at WHOLEFDS MRKT",
        merchant="WHOLEFDS MRKT",
        amount=amount,
        category="Groceries",
        payment_method=payment_method,
        rule="bank_debit",
        confidence=confidence,
    )


@pytest.fixture
async def reference(local_router):
    service = ReferenceService(local_router)
    await service.seed_defaults()
    return service


@pytest.fixture
def gate(local_router, reference):
    return SenderApprovalGate(local_router, reference)


class TestRoute:
    async def test_unknown_sender_goes_to_review(self, gate, local_router):
        decision = await gate.route(_candidate())

        assert decision.auto_filed is None
        pending = decision.pending_review
        assert pending.status == "pending"
        assert pending.amount == "14.50"
        assert pending.sender == SENDER
        assert pending.raw_message == "Debit: $14.50 at WHOLEFDS MRKT"

        stored = await local_router.load(Collection.TRANSACTIONS)
        assert [t.id for t in stored] == [pending.id]

    async def test_approved_sender_is_auto_filed(self, gate, reference):
        await reference.remember_sender(
            ApprovedSender(sender=SENDER, payment_method="HDFC Credit Card", category="Food & Dining")
        )

        decision = await gate.route(_candidate())

        filed = decision.auto_filed
        assert decision.pending_review is None
        assert filed.status == "completed"
        assert filed.category == "Food & Dining"
        assert filed.payment_method == "HDFC Credit Card"
        assert filed.notes == AUTO_FILED_NOTE
        assert filed.type == "expense"

    async def test_unknown_payment_method_falls_back_to_other(self, gate, reference):
        await reference.remember_sender(ApprovedSender(sender=SENDER))

        decision = await gate.route(_candidate(payment_method="Visa Card ending 4321"))

        assert decision.auto_filed.payment_method == "Other"
        assert decision.auto_filed.category == "Groceries"

    async def test_unparsed_amount_always_reviewed(self, gate, reference):
        await reference.remember_sender(ApprovedSender(sender=SENDER, category="Groceries"))

        decision = await gate.route(_candidate(amount="0.00", confidence=Confidence.NONE))

        assert decision.auto_filed is None
        assert decision.pending_review.amount == "0.00"

    async def test_sender_match_is_exact(self, gate, reference):
        await reference.remember_sender(ApprovedSender(sender=SENDER))

        decision = await gate.route(_candidate(sender="Alerts@HDFCbank.net"))

        assert decision.pending_review is not None


class TestReview:
    async def test_pending_is_oldest_first(self, gate):
        newer = await gate.route(_candidate(amount="2.00"))
        older = await gate.route(_candidate(amount="1.00", occurred_at=WHEN - timedelta(days=1)))

        pending = await gate.pending()

        assert [t.id for t in pending] == [older.pending_review.id, newer.pending_review.id]

    async def test_approve_remembers_sender_for_next_time(self, gate, reference):
        first = await gate.route(_candidate())

        approved = await gate.approve(
            first.pending_review.id,
            ReviewEdits(category="Food & Dining", payment_method="Cash"),
        )

        assert approved.status == "completed"
        assert approved.category == "Food & Dining"
        assert await reference.find_approved_sender(SENDER) == ApprovedSender(
            sender=SENDER, payment_method="Cash", category="Food & Dining"
        )

        second = await gate.route(_candidate(amount="20.00"))

        assert second.auto_filed is not None
        assert second.auto_filed.category == "Food & Dining"
        assert second.auto_filed.payment_method == "Cash"
        assert await gate.pending() == []

    async def test_approve_without_remembering(self, gate, reference):
        decision = await gate.route(_candidate())

        await gate.approve(decision.pending_review.id, remember_sender=False)

        assert await reference.find_approved_sender(SENDER) is None

    async def test_approve_applies_amount_edit(self, gate):
        decision = await gate.route(_candidate(amount="0.00", confidence=Confidence.NONE))

        approved = await gate.approve(decision.pending_review.id, ReviewEdits(amount="42.00"))

        assert approved.amount == "42.00"

    async def test_reject_keeps_transaction(self, gate, local_router):
        decision = await gate.route(_candidate())

        rejected = await gate.reject(decision.pending_review.id)

        assert rejected.status == "rejected"
        stored = await local_router.load(Collection.TRANSACTIONS)
        assert [t.status for t in stored] == ["rejected"]

    async def test_cannot_review_twice(self, gate):
        decision = await gate.route(_candidate())
        await gate.reject(decision.pending_review.id)

        with pytest.raises(ReviewStateError):
            await gate.approve(decision.pending_review.id)

    async def test_unknown_id(self, gate):
        with pytest.raises(TransactionNotFoundError):
            await gate.reject("does-not-exist")
