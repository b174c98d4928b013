"""Persisted storage configuration (mode and spreadsheet id)."""

import logging

from autoexpense.schemas.storage import StorageConfig, StorageMode
from autoexpense.storage.records import EncryptedRecordStore

logger = logging.getLogger(__name__)

STORAGE_TYPE_KEY = "storage_type"
SHEET_ID_KEY = "google_sheet_id"


class StorageConfigStore:
    """Reads and writes the StorageConfig in the local encrypted store."""

    def __init__(self, store: EncryptedRecordStore):
        self._store = store

    async def load(self) -> StorageConfig:
        """Load the persisted config; unknown or missing modes mean local."""
        raw_mode = await self._store.get(STORAGE_TYPE_KEY)
        try:
            mode = StorageMode(raw_mode) if raw_mode else StorageMode.LOCAL
        except ValueError:
            logger.warning("Unknown persisted storage mode, using local", extra={"mode": raw_mode})
            mode = StorageMode.LOCAL
        spreadsheet_id = await self._store.get(SHEET_ID_KEY) if mode.is_remote else None
        return StorageConfig(mode=mode, spreadsheet_id=spreadsheet_id)

    async def save(self, config: StorageConfig) -> None:
        await self._store.set(STORAGE_TYPE_KEY, config.mode.value)
        if config.mode.is_remote and config.spreadsheet_id:
            await self._store.set(SHEET_ID_KEY, config.spreadsheet_id)
        else:
            await self._store.delete(SHEET_ID_KEY)
        logger.info("Storage configuration saved", extra={"mode": config.mode.value})
