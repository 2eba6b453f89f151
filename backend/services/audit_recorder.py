"""
Append-only, size-bounded audit log
"""
from typing import List, Optional, Union

from backend.services.entities import AuditAction, AuditEntry
from backend.storage.base import LOGS, PersistenceAdapter
from backend.utils.errors import PersistenceError
from backend.utils.logger import get_logger

logger = get_logger(__name__)

MAX_LOG_ENTRIES = 50


class AuditRecorder:
    """
    Keeps the most recent ``limit`` entries, newest first.

    Persistence is best effort: failures are logged and never reach the
    caller, and the in-memory log is kept as is.
    """

    def __init__(self, adapter: PersistenceAdapter, limit: int = MAX_LOG_ENTRIES):
        self.adapter = adapter
        self.limit = limit
        self._entries: List[AuditEntry] = []

    async def load(self) -> List[AuditEntry]:
        try:
            records = await self.adapter.get_all(LOGS)
        except PersistenceError as e:
            logger.error(f"Failed to load audit logs: {e}")
            return self.list()

        entries = []
        for record in records:
            try:
                entries.append(AuditEntry.from_record(record))
            except ValueError as e:
                logger.warning(f"Skipping unreadable audit entry {record.get('id')}: {e}")
        entries.sort(key=lambda e: e.timestamp, reverse=True)

        self._entries = entries[:self.limit]
        for evicted in entries[self.limit:]:
            await self._forget(evicted)
        return self.list()

    async def append(
        self,
        action: Union[AuditAction, str],
        details: str,
        user_id: Optional[str] = None,
    ) -> AuditEntry:
        entry = AuditEntry(action=AuditAction(action), details=details, user_id=user_id)

        self._entries.insert(0, entry)
        evicted = self._entries[self.limit:]
        del self._entries[self.limit:]

        try:
            await self.adapter.put(LOGS, entry.to_record())
        except PersistenceError as e:
            logger.error(f"Failed to persist audit entry {entry.action.value}: {e}")
        for old in evicted:
            await self._forget(old)
        return entry

    async def _forget(self, entry: AuditEntry) -> None:
        try:
            await self.adapter.delete(LOGS, entry.id)
        except PersistenceError as e:
            logger.error(f"Failed to evict audit entry {entry.id}: {e}")

    async def clear(self) -> None:
        self._entries = []
        try:
            await self.adapter.clear(LOGS)
        except PersistenceError as e:
            logger.error(f"Failed to clear audit logs: {e}")

    def list(self) -> List[AuditEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
