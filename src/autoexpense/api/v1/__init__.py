"""API version 1 routes."""

from fastapi import APIRouter

from autoexpense.api.v1 import ingest, reference, review, storage, transactions

router = APIRouter(prefix="/api/v1")

# Include routers
router.include_router(transactions.router)
router.include_router(review.router)
router.include_router(ingest.router)
router.include_router(storage.router)
router.include_router(reference.router)
