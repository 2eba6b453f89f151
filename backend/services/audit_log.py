"""
Server-side audit log: per-user, bounded to the most recent entries
"""
from typing import List, Optional, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.models.audit import AuditLogRecord
from backend.services.audit_recorder import MAX_LOG_ENTRIES
from backend.services.entities import AuditAction, AuditEntry
from backend.utils.helpers import new_id, now_ms


def to_entry(record: AuditLogRecord) -> AuditEntry:
    return AuditEntry(
        id=record.id,
        action=record.action,
        timestamp=record.timestamp,
        details=record.details or "",
        user_id=str(record.user_id) if record.user_id is not None else None,
    )


async def list_entries(db: AsyncSession, user_id: int, limit: int = MAX_LOG_ENTRIES) -> List[AuditLogRecord]:
    result = await db.execute(
        select(AuditLogRecord)
        .where(AuditLogRecord.user_id == user_id)
        .order_by(AuditLogRecord.timestamp.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def trim_log(db: AsyncSession, user_id: int, limit: int = MAX_LOG_ENTRIES) -> int:
    """Delete everything older than the newest *limit* entries"""
    result = await db.execute(
        select(AuditLogRecord.id)
        .where(AuditLogRecord.user_id == user_id)
        .order_by(AuditLogRecord.timestamp.desc())
        .offset(limit)
    )
    stale = list(result.scalars().all())
    if stale:
        await db.execute(delete(AuditLogRecord).where(AuditLogRecord.id.in_(stale)))
    return len(stale)


async def log_action(
    db: AsyncSession,
    user_id: Optional[int],
    action: Union[AuditAction, str],
    details: str,
    entry_id: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> AuditLogRecord:
    """Add an entry to the session; the caller commits"""
    record = AuditLogRecord(
        id=entry_id or new_id(),
        user_id=user_id,
        action=AuditAction(action).value,
        details=details,
        timestamp=timestamp or now_ms(),
    )
    db.add(record)
    await db.flush()
    if user_id is not None:
        await trim_log(db, user_id)
    return record
