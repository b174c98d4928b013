"""Backend selection and typed collection access."""

import logging
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from autoexpense.core.exceptions import SpreadsheetNotConfiguredError
from autoexpense.schemas.storage import StorageConfig
from autoexpense.storage.backends import CachingBackend, LocalBackend, RemoteBackend, StorageBackend
from autoexpense.storage.collections import CACHE_SUFFIX, Collection
from autoexpense.storage.records import EncryptedRecordStore
from autoexpense.storage.sheets import SheetsClient

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def build_backend(
    config: StorageConfig,
    store: EncryptedRecordStore,
    sheets_client: SheetsClient | None = None,
    read_timeout: float = 10.0,
) -> StorageBackend:
    """Pick the backend for a storage configuration.

    Raises:
        SpreadsheetNotConfiguredError: Remote mode without a spreadsheet id or client
    """
    if not config.mode.is_remote:
        return LocalBackend(store)
    if not config.spreadsheet_id or sheets_client is None:
        raise SpreadsheetNotConfiguredError(
            details={"mode": config.mode.value, "has_client": sheets_client is not None}
        )
    return CachingBackend(
        RemoteBackend(sheets_client, config.spreadsheet_id, review_store=store),
        LocalBackend(store, key_suffix=CACHE_SUFFIX),
        read_timeout=read_timeout,
    )


class StorageRouter:
    """Collection access for the rest of the app.

    The backend is chosen once, at construction, from the StorageConfig.
    Switching storage mode means building a new router.
    """

    def __init__(
        self,
        config: StorageConfig,
        store: EncryptedRecordStore,
        sheets_client: SheetsClient | None = None,
        read_timeout: float = 10.0,
        backend: StorageBackend | None = None,
    ):
        self.config = config
        self.backend = backend or build_backend(config, store, sheets_client, read_timeout)
        logger.debug(
            "Storage router ready",
            extra={"mode": config.mode.value, "backend": type(self.backend).__name__},
        )

    async def get(self, collection: Collection, fresh: bool = False) -> list[dict]:
        """Read a collection.

        With ``fresh`` the read never falls back to cached data and raises
        RemoteStoreError instead; callers that write the collection back use it.
        """
        if fresh:
            return await self.backend.get_fresh(collection)
        return await self.backend.get(collection)

    async def put(self, collection: Collection, items: list[dict]) -> None:
        await self.backend.put(collection, items)

    async def append(self, collection: Collection, item: dict) -> None:
        await self.backend.append(collection, item)

    async def update_by_id(self, collection: Collection, id_: str, item: dict) -> bool:
        return await self.backend.update_by_id(collection, id_, item)

    async def delete_by_id(self, collection: Collection, id_: str) -> bool:
        return await self.backend.delete_by_id(collection, id_)

    # Typed helpers

    async def load(self, collection: Collection, fresh: bool = False) -> list[BaseModel]:
        """Get a collection as validated models, skipping malformed items."""
        schema = collection.schema
        models = []
        for raw in await self.get(collection, fresh=fresh):
            try:
                models.append(schema.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "Skipping malformed item",
                    extra={"collection": collection.value, "errors": e.error_count()},
                )
        return models

    async def save(self, collection: Collection, items: list[BaseModel]) -> None:
        await self.put(collection, [dump(item) for item in items])

    async def add(self, collection: Collection, item: BaseModel) -> None:
        await self.append(collection, dump(item))

    async def replace(self, collection: Collection, id_: str, item: BaseModel) -> bool:
        return await self.update_by_id(collection, id_, dump(item))


def dump(item: BaseModel) -> dict:
    return item.model_dump(mode="json")
