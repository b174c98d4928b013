"""Unit tests for the encrypted record store and key handling."""

import pytest
from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy import select

from autoexpense.models.record import SecureRecord
from autoexpense.storage.crypto import RecordCipher, load_or_create_key
from autoexpense.storage.records import EncryptedRecordStore


class TestRecordStore:
    async def test_set_and_get_round_trip(self, record_store):
        await record_store.set("categories", [{"id": "1", "name": "Food"}])

        assert await record_store.get("categories") == [{"id": "1", "name": "Food"}]

    async def test_missing_key(self, record_store):
        assert await record_store.get("nope") is None
        assert await record_store.get_raw("nope") is None

    async def test_value_is_encrypted_at_rest(self, record_store, session_factory):
        await record_store.set("google_sheet_id", "sheet-secret-id")

        async with session_factory() as session:
            record = await session.scalar(select(SecureRecord).where(SecureRecord.key == "google_sheet_id"))

        assert b"sheet-secret-id" not in record.ciphertext
        assert (await record_store.get_raw("google_sheet_id")).encode() == record.ciphertext

    async def test_set_overwrites(self, record_store):
        await record_store.set("storage_type", "offline")
        await record_store.set("storage_type", "auto")

        assert await record_store.get("storage_type") == "auto"
        assert await record_store.keys() == ["storage_type"]

    async def test_delete(self, record_store):
        await record_store.set("k", 1)

        assert await record_store.delete("k") is True
        assert await record_store.delete("k") is False
        assert await record_store.get("k") is None

    async def test_foreign_key_blob_raises(self, record_store, session_factory):
        other = RecordCipher(Fernet.generate_key())
        store = EncryptedRecordStore(session_factory, other)
        await store.set("categories", [])

        with pytest.raises(InvalidToken):
            await record_store.get("categories")


class TestKeyManagement:
    def test_explicit_key_wins(self, tmp_path):
        key = Fernet.generate_key()

        assert load_or_create_key(key.decode(), tmp_path / "key") == key
        assert not (tmp_path / "key").exists()

    def test_key_file_created_once(self, tmp_path):
        path = tmp_path / "nested" / ".encryption_key"

        first = load_or_create_key(None, path)
        second = load_or_create_key(None, path)

        assert first == second
        assert path.read_bytes() == first
        Fernet(first)

    def test_cipher_round_trip(self):
        cipher = RecordCipher(Fernet.generate_key())

        token = cipher.encrypt({"amount": "14.50", "tags": ["a"]})

        assert cipher.decrypt(token) == {"amount": "14.50", "tags": ["a"]}
