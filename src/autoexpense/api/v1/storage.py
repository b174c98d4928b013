"""Storage mode endpoints."""

from fastapi import APIRouter, Depends

from autoexpense.api.deps import get_container, get_setup_service
from autoexpense.container import AppContainer
from autoexpense.schemas.storage import SelectSheetRequest, StorageConfig, StorageStatus
from autoexpense.services.setup import StorageSetupService
from autoexpense.storage.sheets import SheetsClient

router = APIRouter(prefix="/storage", tags=["storage"])


def _status(config: StorageConfig) -> StorageStatus:
    return StorageStatus(
        mode=config.mode,
        spreadsheet_id=config.spreadsheet_id,
        spreadsheet_url=(
            SheetsClient.spreadsheet_url(config.spreadsheet_id) if config.spreadsheet_id else None
        ),
    )


@router.get("", response_model=StorageStatus)
async def get_storage(container: AppContainer = Depends(get_container)) -> StorageStatus:
    return _status(container.config)


@router.post("/local", response_model=StorageStatus)
async def use_local_storage(
    container: AppContainer = Depends(get_container),
    setup: StorageSetupService = Depends(get_setup_service),
) -> StorageStatus:
    config = await setup.use_local()
    container.apply(config)
    return _status(config)


@router.post("/sheets", response_model=StorageStatus, summary="Create a new expense spreadsheet")
async def create_sheet(
    container: AppContainer = Depends(get_container),
    setup: StorageSetupService = Depends(get_setup_service),
) -> StorageStatus:
    config = await setup.create_spreadsheet()
    container.apply(config)
    return _status(config)


@router.post(
    "/sheets/select",
    response_model=StorageStatus,
    summary="Use an existing spreadsheet",
    description="The sheet must have the Transactions and Configuration tabs with the expected headers.",
)
async def select_sheet(
    data: SelectSheetRequest,
    container: AppContainer = Depends(get_container),
    setup: StorageSetupService = Depends(get_setup_service),
) -> StorageStatus:
    config = await setup.select_existing(data.spreadsheet_id)
    container.apply(config)
    return _status(config)
