"""Infrastructure layer exports."""

from .persistence import PersistenceGateway, SaveResult, storage_key
from .storage import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore, StorageQuotaError

__all__ = [
    "FileKeyValueStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "PersistenceGateway",
    "SaveResult",
    "StorageQuotaError",
    "storage_key",
]
