"""Entity Store and its storage backends."""

from bloom.storage.backends import FileBackend, MemoryBackend, PostgresBackend, StorageBackend
from bloom.storage.collections import Collection
from bloom.storage.entity_store import EntityStore, StoreTransaction

__all__ = [
    "Collection",
    "EntityStore",
    "FileBackend",
    "MemoryBackend",
    "PostgresBackend",
    "StorageBackend",
    "StoreTransaction",
]
