"""Storage onboarding: local, new spreadsheet, or existing spreadsheet."""

import logging
from datetime import datetime, timezone

import httpx

from autoexpense.core.exceptions import (
    SessionExpiredError,
    SheetAccessError,
    SheetCreationError,
    SheetFormatError,
    SpreadsheetNotConfiguredError,
)
from autoexpense.schemas.storage import StorageConfig, StorageMode
from autoexpense.services.reference import ReferenceService
from autoexpense.storage.collections import Collection
from autoexpense.storage.config_store import StorageConfigStore
from autoexpense.storage.records import EncryptedRecordStore
from autoexpense.storage.router import StorageRouter
from autoexpense.storage.sheets import SheetsClient

logger = logging.getLogger(__name__)

SPREADSHEET_TITLE = "Auto Expense {year}"


class StorageSetupService:
    """Chooses and persists the storage mode.

    Each operation returns the new StorageConfig; callers rebuild their
    StorageRouter from it. Nothing is persisted when an operation fails.
    """

    def __init__(
        self,
        store: EncryptedRecordStore,
        config_store: StorageConfigStore,
        sheets_client: SheetsClient | None = None,
    ):
        self.store = store
        self.config_store = config_store
        self.sheets_client = sheets_client
        self._local = StorageRouter(StorageConfig(mode=StorageMode.LOCAL), store)

    def _require_client(self) -> SheetsClient:
        if self.sheets_client is None:
            raise SpreadsheetNotConfiguredError(details={"reason": "google account not connected"})
        return self.sheets_client

    async def use_local(self) -> StorageConfig:
        """Switch to the local encrypted store and seed default reference data."""
        await ReferenceService(self._local).seed_defaults()
        config = StorageConfig(mode=StorageMode.LOCAL)
        await self.config_store.save(config)
        return config

    async def _seed_data(self) -> dict[Collection, list[dict]]:
        await ReferenceService(self._local).seed_defaults()
        return {
            collection: await self._local.get(collection)
            for collection in (
                Collection.CATEGORIES,
                Collection.PAYMENT_METHODS,
                Collection.KEYWORDS,
                Collection.APPROVED_SENDERS,
            )
        }

    async def create_spreadsheet(self, now: datetime | None = None) -> StorageConfig:
        """Create "Auto Expense <year>", write its layout and local seed data.

        Raises:
            SpreadsheetNotConfiguredError: No Google account is connected
            SheetCreationError: The spreadsheet could not be created or initialized
        """
        client = self._require_client()
        title = SPREADSHEET_TITLE.format(year=(now or datetime.now(timezone.utc)).year)
        seed = await self._seed_data()
        try:
            spreadsheet_id = await client.create_spreadsheet(title)
            await client.initialize_spreadsheet(spreadsheet_id, seed)
        except (httpx.HTTPError, SessionExpiredError, ValueError) as e:
            logger.error("Spreadsheet creation failed", extra={"error_type": type(e).__name__})
            raise SheetCreationError(details={"error_type": type(e).__name__}) from e

        config = StorageConfig(mode=StorageMode.REMOTE_NEW, spreadsheet_id=spreadsheet_id)
        await self.config_store.save(config)
        logger.info("Remote storage created", extra={"spreadsheet_id": spreadsheet_id})
        return config

    async def select_existing(self, spreadsheet_id: str) -> StorageConfig:
        """Use an existing spreadsheet after checking its layout.

        Raises:
            SpreadsheetNotConfiguredError: No Google account is connected
            SheetFormatError: The sheet does not follow the expected layout
            SheetAccessError: The sheet could not be read
        """
        client = self._require_client()
        try:
            valid = await client.validate_format(spreadsheet_id)
        except (httpx.HTTPError, SessionExpiredError, ValueError) as e:
            logger.error("Spreadsheet validation failed", extra={"error_type": type(e).__name__})
            raise SheetAccessError(details={"error_type": type(e).__name__}) from e

        if not valid:
            raise SheetFormatError(details={"spreadsheet_id": spreadsheet_id})

        config = StorageConfig(mode=StorageMode.REMOTE_EXISTING, spreadsheet_id=spreadsheet_id)
        await self.config_store.save(config)
        logger.info("Existing spreadsheet selected", extra={"spreadsheet_id": spreadsheet_id})
        return config
