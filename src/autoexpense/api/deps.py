"""FastAPI dependency injection for the app container and services."""

from fastapi import Depends, Request

from autoexpense.container import AppContainer
from autoexpense.mailbox.keywords import KeywordStore
from autoexpense.services.ingestion import IngestionService
from autoexpense.services.reference import ReferenceService
from autoexpense.services.review import SenderApprovalGate
from autoexpense.services.setup import StorageSetupService
from autoexpense.services.transactions import TransactionService


def get_container(request: Request) -> AppContainer:
    """Get the process-wide container created at startup."""
    return request.app.state.container


def get_transaction_service(
    container: AppContainer = Depends(get_container),
) -> TransactionService:
    return container.transactions()


def get_reference_service(
    container: AppContainer = Depends(get_container),
) -> ReferenceService:
    return container.reference()


def get_keyword_store(container: AppContainer = Depends(get_container)) -> KeywordStore:
    return container.keywords()


def get_review_gate(container: AppContainer = Depends(get_container)) -> SenderApprovalGate:
    return container.review()


def get_ingestion_service(
    container: AppContainer = Depends(get_container),
) -> IngestionService:
    return container.ingestion()


def get_setup_service(container: AppContainer = Depends(get_container)) -> StorageSetupService:
    return container.setup()
