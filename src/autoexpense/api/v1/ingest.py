"""Ingestion trigger endpoint."""

from fastapi import APIRouter, Depends

from autoexpense.api.deps import get_ingestion_service
from autoexpense.schemas.review import IngestionResult
from autoexpense.services.ingestion import IngestionService

router = APIRouter(prefix="/ingest", tags=["ingest"])


@router.post(
    "/run",
    response_model=IngestionResult,
    summary="Fetch, parse and file new transaction alerts",
)
async def run_ingestion(
    service: IngestionService = Depends(get_ingestion_service),
) -> IngestionResult:
    return await service.run()
