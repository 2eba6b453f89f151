"""
Audit log API endpoints - per-user trail of recorded mutations
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from typing import List, Optional
from pydantic import BaseModel

from backend.database import get_db
from backend.models.user import User
from backend.models.audit import AuditLogRecord
from backend.api.auth import get_current_user
from backend.services.audit_log import list_entries, log_action, to_entry
from backend.services.entities import AuditAction, AuditEntry

router = APIRouter()


class AuditEntryCreate(BaseModel):
    id: Optional[str] = None
    action: AuditAction
    timestamp: Optional[int] = None
    details: str = ""


@router.get("", response_model=List[AuditEntry], response_model_exclude_none=True)
async def list_audit_entries(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Newest first, at most the retained bound"""
    return [to_entry(r) for r in await list_entries(db, current_user.id)]


@router.post("", response_model=AuditEntry, status_code=201, response_model_exclude_none=True)
async def append_audit_entry(
    data: AuditEntryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Append an entry; re-posting a known id returns the stored entry"""
    if data.id:
        result = await db.execute(
            select(AuditLogRecord).where(
                AuditLogRecord.id == data.id,
                AuditLogRecord.user_id == current_user.id
            )
        )
        existing = result.scalar_one_or_none()
        if existing:
            return to_entry(existing)

    record = await log_action(
        db,
        current_user.id,
        data.action,
        data.details,
        entry_id=data.id,
        timestamp=data.timestamp,
    )
    await db.commit()
    return to_entry(record)


@router.delete("")
async def clear_audit_entries(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await db.execute(delete(AuditLogRecord).where(AuditLogRecord.user_id == current_user.id))
    await db.commit()
    return {"success": True}


@router.delete("/{entry_id}")
async def delete_audit_entry(
    entry_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    result = await db.execute(
        select(AuditLogRecord).where(
            AuditLogRecord.id == entry_id,
            AuditLogRecord.user_id == current_user.id
        )
    )
    entry = result.scalar_one_or_none()
    if not entry:
        raise HTTPException(status_code=404, detail="Audit entry not found")
    await db.delete(entry)
    await db.commit()
    return {"success": True}
