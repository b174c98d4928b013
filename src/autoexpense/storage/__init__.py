"""Local and remote persistence for collections."""

from autoexpense.storage.backends import CachingBackend, LocalBackend, RemoteBackend, StorageBackend
from autoexpense.storage.collections import Collection
from autoexpense.storage.records import EncryptedRecordStore
from autoexpense.storage.router import StorageRouter, build_backend

__all__ = [
    "CachingBackend",
    "Collection",
    "EncryptedRecordStore",
    "LocalBackend",
    "RemoteBackend",
    "StorageBackend",
    "StorageRouter",
    "build_backend",
]
