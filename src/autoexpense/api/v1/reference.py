"""Reference data endpoints: categories, payment methods, keywords, senders."""

from fastapi import APIRouter, Depends

from autoexpense.api.deps import get_keyword_store, get_reference_service
from autoexpense.mailbox.keywords import KeywordStore
from autoexpense.schemas.reference import (
    ApprovedSender,
    Category,
    Keyword,
    KeywordsUpdate,
    PaymentMethod,
)
from autoexpense.services.reference import ReferenceService

router = APIRouter(tags=["reference"])


@router.get("/categories", response_model=list[Category])
async def list_categories(
    service: ReferenceService = Depends(get_reference_service),
) -> list[Category]:
    return await service.categories()


@router.get("/payment-methods", response_model=list[PaymentMethod])
async def list_payment_methods(
    service: ReferenceService = Depends(get_reference_service),
) -> list[PaymentMethod]:
    return await service.payment_methods()


@router.get("/keywords", response_model=list[Keyword])
async def list_keywords(store: KeywordStore = Depends(get_keyword_store)) -> list[Keyword]:
    return await store.get_keywords()


@router.put("/keywords", response_model=list[Keyword])
async def replace_keywords(
    data: KeywordsUpdate,
    store: KeywordStore = Depends(get_keyword_store),
) -> list[Keyword]:
    return await store.replace_texts(data.keywords)


@router.get("/approved-senders", response_model=list[ApprovedSender])
async def list_approved_senders(
    service: ReferenceService = Depends(get_reference_service),
) -> list[ApprovedSender]:
    return await service.approved_senders()
