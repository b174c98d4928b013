"""Encrypted key/value record store over the local database."""

import logging
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from autoexpense.models.record import SecureRecord
from autoexpense.storage.crypto import RecordCipher

logger = logging.getLogger(__name__)


class EncryptedRecordStore:
    """Async get/set/delete of JSON values, encrypted at rest.

    Each call opens its own session so the store can be shared between
    request handlers and background ingestion runs.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], cipher: RecordCipher):
        self._session_factory = session_factory
        self._cipher = cipher

    async def get_raw(self, key: str) -> str | None:
        """Return the stored Fernet token for ``key`` without decrypting it."""
        async with self._session_factory() as session:
            record = await session.get(SecureRecord, key)
            if record is None:
                return None
            return record.ciphertext.decode("ascii")

    async def get(self, key: str) -> Any | None:
        """Return the decrypted value for ``key``, or None if absent.

        A blob that cannot be decrypted or parsed raises; corrupted local
        data is not silently replaced.
        """
        async with self._session_factory() as session:
            record = await session.get(SecureRecord, key)
            if record is None:
                return None
            return self._cipher.decrypt(record.ciphertext)

    async def set(self, key: str, value: Any) -> None:
        token = self._cipher.encrypt(value)
        async with self._session_factory() as session:
            record = await session.get(SecureRecord, key)
            if record is None:
                session.add(SecureRecord(key=key, ciphertext=token))
            else:
                record.ciphertext = token
            await session.commit()
        logger.debug("Stored record", extra={"key": key, "bytes": len(token)})

    async def delete(self, key: str) -> bool:
        """Delete ``key``. Returns True if a record was removed."""
        async with self._session_factory() as session:
            result = await session.execute(delete(SecureRecord).where(SecureRecord.key == key))
            await session.commit()
            return result.rowcount > 0

    async def keys(self) -> list[str]:
        async with self._session_factory() as session:
            result = await session.execute(select(SecureRecord.key).order_by(SecureRecord.key))
            return list(result.scalars().all())
