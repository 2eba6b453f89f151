from backend.storage.base import PersistenceAdapter, TASKS, LOGS, METADATA
from backend.storage.memory import MemoryStore
from backend.storage.document_store import DocumentStore
from backend.storage.legacy_store import LegacyKeyValueStore
from backend.storage.api_store import ApiStore
from backend.storage.migration import migrate_once, MigrationResult
from backend.storage.factory import create_adapter

__all__ = [
    "PersistenceAdapter",
    "TASKS",
    "LOGS",
    "METADATA",
    "MemoryStore",
    "DocumentStore",
    "LegacyKeyValueStore",
    "ApiStore",
    "migrate_once",
    "MigrationResult",
    "create_adapter",
]
