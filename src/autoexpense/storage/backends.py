"""Storage backends behind one interface.

``LocalBackend`` keeps one encrypted blob per collection. ``RemoteBackend``
maps collections onto the spreadsheet layout. ``CachingBackend`` wraps any
backend with read-through caching and a fallback that never raises.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager

import httpx

from autoexpense.core.exceptions import RemoteStoreError, SessionExpiredError
from autoexpense.schemas.transaction import TransactionStatus
from autoexpense.storage.collections import REVIEW_FIELDS, REVIEW_METADATA_KEY, Collection, item_id
from autoexpense.storage.layout import BLOCKS, TRANSACTIONS_SHEET, is_blank_row, item_to_row, row_to_item
from autoexpense.storage.records import EncryptedRecordStore
from autoexpense.storage.sheets import SheetsClient

logger = logging.getLogger(__name__)


class StorageBackend(ABC):
    """Collection-level persistence.

    Items are JSON-ready dicts; ``get`` returns them in stored order.
    """

    @abstractmethod
    async def get(self, collection: Collection) -> list[dict]:
        ...

    async def get_fresh(self, collection: Collection) -> list[dict]:
        """Read that never substitutes cached data; used before rewriting a collection."""
        return await self.get(collection)

    @abstractmethod
    async def put(self, collection: Collection, items: list[dict]) -> None:
        """Replace the whole collection."""

    async def append(self, collection: Collection, item: dict) -> None:
        items = await self.get(collection)
        items.append(item)
        await self.put(collection, items)

    async def update_by_id(self, collection: Collection, id_: str, item: dict) -> bool:
        items = await self.get(collection)
        for index, existing in enumerate(items):
            if item_id(collection, existing) == id_:
                items[index] = item
                await self.put(collection, items)
                return True
        return False

    async def delete_by_id(self, collection: Collection, id_: str) -> bool:
        items = await self.get(collection)
        remaining = [item for item in items if item_id(collection, item) != id_]
        if len(remaining) == len(items):
            return False
        await self.put(collection, remaining)
        return True


class LocalBackend(StorageBackend):
    """One encrypted JSON blob per collection in the local record store."""

    def __init__(self, store: EncryptedRecordStore, key_suffix: str = ""):
        self._store = store
        self._suffix = key_suffix

    def _key(self, collection: Collection) -> str:
        return collection.storage_key + self._suffix

    async def get(self, collection: Collection) -> list[dict]:
        value = await self._store.get(self._key(collection))
        return list(value) if value else []

    async def put(self, collection: Collection, items: list[dict]) -> None:
        await self._store.set(self._key(collection), list(items))


class RemoteBackend(StorageBackend):
    """Spreadsheet-backed store.

    Reads raise on any failure; callers wrap this backend in
    ``CachingBackend`` for fallback. Write failures raise RemoteStoreError
    and are not retried.

    The Transactions tab has no sender or message column. When a
    ``review_store`` is given, those fields of pending transactions are kept
    there, keyed by transaction id, and merged back into reads until the
    transaction leaves the pending state.
    """

    def __init__(
        self,
        client: SheetsClient,
        spreadsheet_id: str,
        review_store: EncryptedRecordStore | None = None,
    ):
        self._client = client
        self.spreadsheet_id = spreadsheet_id
        self._review_store = review_store

    async def _rows(self, collection: Collection) -> list[list]:
        return await self._client.get_values(self.spreadsheet_id, BLOCKS[collection].data_range)

    async def get(self, collection: Collection) -> list[dict]:
        rows = await self._rows(collection)
        items = [
            row_to_item(collection, row, row_number)
            for row_number, row in enumerate(rows, start=2)
            if not is_blank_row(row)
        ]
        if collection is Collection.TRANSACTIONS:
            metadata = await self._review_metadata()
            for item in items:
                item.update(metadata.get(item["id"], {}))
        return items

    async def put(self, collection: Collection, items: list[dict]) -> None:
        block = BLOCKS[collection]
        rows = [item_to_row(collection, item) for item in items]
        async with self._write_guard(collection, "put"):
            await self._client.clear_values(self.spreadsheet_id, block.data_range)
            if rows:
                await self._client.update_values(
                    self.spreadsheet_id, block.rows_range(len(rows)), rows
                )
        if collection is Collection.TRANSACTIONS and self._review_store is not None:
            metadata = {}
            for item in items:
                fields = _review_fields(item)
                if fields:
                    metadata[item_id(collection, item)] = fields
            await self._review_store.set(REVIEW_METADATA_KEY, metadata)

    async def append(self, collection: Collection, item: dict) -> None:
        if collection is not Collection.TRANSACTIONS:
            async with self._write_guard(collection, "append"):
                await super().append(collection, item)
            return
        block = BLOCKS[collection]
        async with self._write_guard(collection, "append"):
            await self._client.append_values(
                self.spreadsheet_id,
                f"{block.sheet}!{block.first_col}:{block.last_col}",
                [item_to_row(collection, item)],
            )
        await self._track_review_fields(item_id(collection, item), _review_fields(item))

    async def _find_row(self, collection: Collection, id_: str) -> int | None:
        """Return the 1-based sheet row holding ``id_``, if any."""
        for row_number, row in enumerate(await self._rows(collection), start=2):
            if not is_blank_row(row) and item_id(collection, row_to_item(collection, row, row_number)) == id_:
                return row_number
        return None

    async def update_by_id(self, collection: Collection, id_: str, item: dict) -> bool:
        if collection is not Collection.TRANSACTIONS:
            async with self._write_guard(collection, "update"):
                return await super().update_by_id(collection, id_, item)
        async with self._write_guard(collection, "update"):
            row_number = await self._find_row(collection, id_)
            if row_number is None:
                return False
            await self._client.update_values(
                self.spreadsheet_id,
                BLOCKS[collection].row_range(row_number),
                [item_to_row(collection, item)],
            )
        await self._track_review_fields(id_, _review_fields(item))
        return True

    async def delete_by_id(self, collection: Collection, id_: str) -> bool:
        if collection is not Collection.TRANSACTIONS:
            async with self._write_guard(collection, "delete"):
                return await super().delete_by_id(collection, id_)
        async with self._write_guard(collection, "delete"):
            row_number = await self._find_row(collection, id_)
            if row_number is None:
                return False
            sheet_id = await self._client.get_sheet_id(self.spreadsheet_id, TRANSACTIONS_SHEET)
            await self._client.batch_update(
                self.spreadsheet_id,
                [
                    {
                        "deleteDimension": {
                            "range": {
                                "sheetId": sheet_id,
                                "dimension": "ROWS",
                                "startIndex": row_number - 1,
                                "endIndex": row_number,
                            }
                        }
                    }
                ],
            )
        await self._track_review_fields(id_, {})
        return True

    async def _review_metadata(self) -> dict[str, dict]:
        if self._review_store is None:
            return {}
        return dict(await self._review_store.get(REVIEW_METADATA_KEY) or {})

    async def _track_review_fields(self, id_: str, fields: dict) -> None:
        """Store ``fields`` for a pending transaction, or forget them when empty."""
        if self._review_store is None:
            return
        metadata = await self._review_metadata()
        if fields:
            metadata[id_] = fields
        elif metadata.pop(id_, None) is None:
            return
        await self._review_store.set(REVIEW_METADATA_KEY, metadata)

    @asynccontextmanager
    async def _write_guard(self, collection: Collection, operation: str):
        """Turn transport and auth failures during a write into RemoteStoreError."""
        try:
            yield
        except RemoteStoreError:
            raise
        except (httpx.HTTPError, SessionExpiredError, KeyError, ValueError) as e:
            details = {
                "collection": collection.value,
                "operation": operation,
                "error_type": type(e).__name__,
            }
            logger.error("Remote write failed", extra=details)
            raise RemoteStoreError(details=details) from e


def _review_fields(item: dict) -> dict:
    """Sheet-less fields worth keeping for a transaction awaiting review."""
    if item.get("status") != TransactionStatus.PENDING.value:
        return {}
    return {field: item[field] for field in REVIEW_FIELDS if item.get(field)}


class CachingBackend(StorageBackend):
    """Read-through cache with fallback-on-failure around another backend.

    Reads try ``inner`` within ``read_timeout`` seconds. On success the
    result is mirrored into ``cache``; on any failure the last cached copy
    is served, or an empty list when nothing was cached yet. Reads never
    raise. Writes go to ``inner`` first and are mirrored to the cache only
    after they succeed.

    ``get_fresh`` is the strict read for read-modify-write callers: it
    raises RemoteStoreError instead of serving the cache, so a stale or
    empty fallback is never written back over the remote copy.
    """

    def __init__(self, inner: StorageBackend, cache: StorageBackend, read_timeout: float = 10.0):
        self.inner = inner
        self.cache = cache
        self.read_timeout = read_timeout

    async def get(self, collection: Collection) -> list[dict]:
        try:
            items = await asyncio.wait_for(self.inner.get(collection), timeout=self.read_timeout)
        except Exception as e:
            logger.warning(
                "Remote read failed, serving cache",
                extra={"collection": collection.value, "error_type": type(e).__name__},
            )
            return await self._cached(collection)

        await self._refresh_cache(collection, items)
        return list(items)

    async def get_fresh(self, collection: Collection) -> list[dict]:
        try:
            items = await asyncio.wait_for(self.inner.get(collection), timeout=self.read_timeout)
        except Exception as e:
            details = {
                "collection": collection.value,
                "operation": "read",
                "error_type": type(e).__name__,
            }
            logger.error("Remote read failed before write", extra=details)
            raise RemoteStoreError(details=details) from e

        await self._refresh_cache(collection, items)
        return list(items)

    async def _refresh_cache(self, collection: Collection, items: list[dict]) -> None:
        try:
            await self.cache.put(collection, items)
        except Exception as e:
            logger.warning(
                "Cache refresh failed",
                extra={"collection": collection.value, "error_type": type(e).__name__},
            )

    async def _cached(self, collection: Collection) -> list[dict]:
        try:
            return await self.cache.get(collection)
        except Exception as e:
            logger.error(
                "Cache read failed, returning empty collection",
                extra={"collection": collection.value, "error_type": type(e).__name__},
            )
            return []

    async def _mirror(self, collection: Collection, operation) -> None:
        try:
            await operation
        except Exception as e:
            logger.warning(
                "Cache write-through failed",
                extra={"collection": collection.value, "error_type": type(e).__name__},
            )

    async def put(self, collection: Collection, items: list[dict]) -> None:
        await self.inner.put(collection, items)
        await self._mirror(collection, self.cache.put(collection, items))

    async def append(self, collection: Collection, item: dict) -> None:
        await self.inner.append(collection, item)
        await self._mirror(collection, self.cache.append(collection, item))

    async def update_by_id(self, collection: Collection, id_: str, item: dict) -> bool:
        updated = await self.inner.update_by_id(collection, id_, item)
        if updated:
            await self._mirror(collection, self.cache.update_by_id(collection, id_, item))
        return updated

    async def delete_by_id(self, collection: Collection, id_: str) -> bool:
        deleted = await self.inner.delete_by_id(collection, id_)
        if deleted:
            await self._mirror(collection, self.cache.delete_by_id(collection, id_))
        return deleted
