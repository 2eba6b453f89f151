"""
One-time migration: legacy key/value store -> current store.

Completion is recorded under the ``migration_complete`` metadata key. The
legacy store is only read, never modified, so a failed run can be retried on
the next start.
"""
from dataclasses import dataclass, field
from typing import List, Optional

from backend.services.entities import AuditEntry, Task
from backend.storage.base import (
    LOGS, METADATA, MIGRATION_COMPLETE, TASKS, THEME, VALID_THEMES, PersistenceAdapter,
)
from backend.utils.errors import MigrationError, PersistenceError
from backend.utils.helpers import now_ms
from backend.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class MigrationResult:
    completed: bool = False
    skipped: bool = False
    tasks: int = 0
    logs: int = 0
    theme: Optional[str] = None
    errors: List[str] = field(default_factory=list)


async def _copy_tasks(legacy: PersistenceAdapter, current: PersistenceAdapter) -> int:
    try:
        records = await legacy.get_all(TASKS)
        for record in records:
            await current.put(TASKS, Task.from_record(record).to_record())
    except (PersistenceError, ValueError) as e:
        raise MigrationError(f"Task migration failed: {e}") from e
    return len(records)


async def _copy_logs(legacy: PersistenceAdapter, current: PersistenceAdapter) -> int:
    try:
        records = await legacy.get_all(LOGS)
        for record in records:
            await current.put(LOGS, AuditEntry.from_record(record).to_record())
    except (PersistenceError, ValueError) as e:
        raise MigrationError(f"Log migration failed: {e}") from e
    return len(records)


async def _copy_theme(legacy: PersistenceAdapter, current: PersistenceAdapter) -> Optional[str]:
    try:
        record = await legacy.get(METADATA, THEME)
        theme = record["value"] if record else None
        if theme not in VALID_THEMES:
            return None
        await current.put(METADATA, {"key": THEME, "value": theme})
    except PersistenceError as e:
        raise MigrationError(f"Theme migration failed: {e}") from e
    return theme


async def migrate_once(
    legacy: PersistenceAdapter,
    current: PersistenceAdapter,
    marker: Optional[PersistenceAdapter] = None,
) -> MigrationResult:
    """
    Copy every legacy task, audit entry and theme preference into *current*.

    *marker* holds the completion flag and defaults to *current*. A second
    call after a successful one copies nothing. Failures are logged and
    reported in the result; the flag stays unset so the next start retries.
    """
    marker = marker or current
    result = MigrationResult()

    try:
        done = await marker.get(METADATA, MIGRATION_COMPLETE)
    except PersistenceError as e:
        logger.error(f"Could not read migration flag, will retry on next start: {e}")
        result.errors.append(str(e))
        return result

    if done:
        result.completed = True
        result.skipped = True
        return result

    logger.info(f"Starting migration from {legacy.name} store to {current.name} store")

    try:
        result.tasks = await _copy_tasks(legacy, current)
        result.logs = await _copy_logs(legacy, current)
        result.theme = await _copy_theme(legacy, current)
    except MigrationError as e:
        logger.error(f"Migration aborted, legacy data left untouched: {e}")
        result.errors.append(str(e))
        return result

    try:
        await marker.put(METADATA, {"key": MIGRATION_COMPLETE, "value": True, "migratedAt": now_ms()})
    except PersistenceError as e:
        logger.error(f"Could not record migration completion: {e}")
        result.errors.append(str(e))
        return result

    result.completed = True
    logger.info(f"Migrated {result.tasks} tasks and {result.logs} logs")
    return result
