"""
In-process store for ephemeral sessions
"""
import copy
from typing import Dict, List, Optional

from backend.storage.base import PersistenceAdapter, Record, record_key


class MemoryStore(PersistenceAdapter):
    name = "memory"

    def __init__(self):
        self._data: Dict[str, Dict[str, Record]] = {c: {} for c in self.collections}

    async def get_all(self, collection: str) -> List[Record]:
        self._check_collection(collection)
        return [copy.deepcopy(r) for r in self._data[collection].values()]

    async def get(self, collection: str, key: str) -> Optional[Record]:
        self._check_collection(collection)
        record = self._data[collection].get(key)
        return copy.deepcopy(record) if record is not None else None

    async def put(self, collection: str, record: Record) -> None:
        self._check_collection(collection)
        self._data[collection][record_key(collection, record)] = copy.deepcopy(record)

    async def delete(self, collection: str, key: str) -> None:
        self._check_collection(collection)
        self._data[collection].pop(key, None)

    async def clear(self, collection: str) -> None:
        self._check_collection(collection)
        self._data[collection].clear()
