"""Categories, payment methods and approved senders."""

import logging

from autoexpense.schemas.reference import ApprovedSender, Category, PaymentMethod
from autoexpense.storage.collections import Collection
from autoexpense.storage.router import StorageRouter

logger = logging.getLogger(__name__)

OTHER_PAYMENT_METHOD = "Other"

DEFAULT_CATEGORIES: list[Category] = [
    Category(id="1", name="Food & Dining", icon="restaurant", color="#f97316",
             description="Dining out, food delivery, snacks"),
    Category(id="2", name="Transport", icon="car", color="#3b82f6",
             description="Fuel, cabs, public transit"),
    Category(id="3", name="Shopping", icon="bag", color="#8b5cf6",
             description="Clothing, electronics, home"),
    Category(id="4", name="Bills & Utilities", icon="home", color="#10b981",
             description="Monthly bills, internet, electricity"),
    Category(id="5", name="Healthcare", icon="fitness", color="#ef4444",
             description="Doctors, pharmacy, insurance"),
    Category(id="6", name="Entertainment", icon="game-controller", color="#ec4899",
             description="Movies, games, subscriptions"),
]

DEFAULT_PAYMENT_METHODS: list[PaymentMethod] = [
    PaymentMethod(id="1", name="HDFC Credit Card", type="card", icon="card", color="#3b82f6",
                  description="Primary credit card"),
    PaymentMethod(id="2", name="Savings Account", type="bank", icon="wallet", color="#10b981",
                  description="Main savings account"),
    PaymentMethod(id="3", name="Cash", type="cash", icon="cash", color="#f59e0b",
                  description="Physical cash payments"),
    PaymentMethod(id="4", name="Paytm Wallet", type="wallet", icon="phone-portrait", color="#8b5cf6",
                  description="Digital wallet"),
    PaymentMethod(id="5", name=OTHER_PAYMENT_METHOD, type="card", icon="ellipsis-horizontal", color="#6b7280",
                  description="Other payment methods"),
]


class ReferenceService:
    """Read access to reference collections plus default seeding."""

    def __init__(self, router: StorageRouter):
        self.router = router

    async def categories(self) -> list[Category]:
        return await self.router.load(Collection.CATEGORIES)

    async def payment_methods(self) -> list[PaymentMethod]:
        return await self.router.load(Collection.PAYMENT_METHODS)

    async def payment_method_names(self) -> set[str]:
        return {m.name for m in await self.payment_methods()}

    async def approved_senders(self) -> list[ApprovedSender]:
        return await self.router.load(Collection.APPROVED_SENDERS)

    async def find_approved_sender(self, sender: str) -> ApprovedSender | None:
        """Exact-match lookup of an approved sender."""
        if not sender:
            return None
        for approved in await self.approved_senders():
            if approved.sender == sender:
                return approved
        return None

    async def remember_sender(self, approved: ApprovedSender) -> None:
        """Insert or replace the approved-sender entry for ``approved.sender``."""
        current = await self.router.load(Collection.APPROVED_SENDERS, fresh=True)
        senders = [s for s in current if s.sender != approved.sender]
        senders.append(approved)
        await self.router.save(Collection.APPROVED_SENDERS, senders)
        logger.info("Sender approved for auto-filing")

    async def seed_defaults(self) -> dict[str, int]:
        """Add default categories and payment methods whose ids are missing.

        Returns:
            Number of items added per collection
        """
        added = {}
        for collection, defaults in (
            (Collection.CATEGORIES, DEFAULT_CATEGORIES),
            (Collection.PAYMENT_METHODS, DEFAULT_PAYMENT_METHODS),
        ):
            existing = await self.router.load(collection, fresh=True)
            existing_ids = {item.id for item in existing}
            missing = [item for item in defaults if item.id not in existing_ids]
            if missing:
                await self.router.save(collection, existing + missing)
            added[collection.value] = len(missing)
        return added
