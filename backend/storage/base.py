"""
Uniform persistence contract shared by every backing store
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from backend.utils.errors import PersistenceError

TASKS = "tasks"
LOGS = "logs"
METADATA = "metadata"

COLLECTIONS = (TASKS, LOGS, METADATA)

# Metadata keys
MIGRATION_COMPLETE = "migration_complete"
AUTH_METADATA = "auth_metadata"
THEME = "theme"

VALID_THEMES = ("light", "dark")
DEFAULT_THEME = "dark"

Record = Dict[str, Any]


def record_key(collection: str, record: Record) -> str:
    """Metadata records are keyed by ``key``, everything else by ``id``"""
    field = "key" if collection == METADATA else "id"
    try:
        return str(record[field])
    except KeyError:
        raise PersistenceError(f"Record for '{collection}' has no '{field}'") from None


class PersistenceAdapter(ABC):
    """
    Base class for all backing stores.

    Collections are ``tasks``, ``logs`` and ``metadata``. Every I/O failure
    is raised as PersistenceError.
    """

    name = "base"
    collections: tuple = COLLECTIONS

    async def open(self) -> None:
        """Acquire the underlying resource"""

    async def close(self) -> None:
        """Release the underlying resource"""

    async def __aenter__(self) -> "PersistenceAdapter":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _check_collection(self, collection: str) -> None:
        if collection not in self.collections:
            raise PersistenceError(
                f"{self.name} store does not support collection '{collection}'"
            )

    @abstractmethod
    async def get_all(self, collection: str) -> List[Record]:
        pass

    @abstractmethod
    async def get(self, collection: str, key: str) -> Optional[Record]:
        pass

    @abstractmethod
    async def put(self, collection: str, record: Record) -> None:
        """Insert or replace a record by its key"""
        pass

    @abstractmethod
    async def delete(self, collection: str, key: str) -> None:
        pass

    @abstractmethod
    async def clear(self, collection: str) -> None:
        pass
