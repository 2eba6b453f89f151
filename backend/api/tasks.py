"""
Task API endpoints - per-user task records
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from typing import List, Optional
from pydantic import BaseModel, Field

from backend.database import get_db
from backend.models.user import User
from backend.models.task import TaskRecord
from backend.api.auth import get_current_user
from backend.services.entities import Task, TaskStatus
from backend.utils.errors import ConflictError, NotFoundError, ValidationError
from backend.utils.helpers import now_ms
from backend.utils.validators import normalize_description, validate_title

router = APIRouter()


# --- Pydantic Schemas ---

class TaskCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class TaskPut(BaseModel):
    """Full record for upsert; title is checked by validate_title"""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    created_at: Optional[int] = Field(default=None, alias="createdAt")

    class Config:
        populate_by_name = True


class TaskImportItem(TaskPut):
    id: Optional[str] = None


# --- Helpers ---

def _build_task_response(t: TaskRecord) -> Task:
    return Task(
        id=t.id,
        title=t.title,
        description=t.description or "",
        status=t.status,
        created_at=t.created_at,
    )


async def _get_owned_task(db: AsyncSession, task_id: str, user: User) -> TaskRecord:
    result = await db.execute(
        select(TaskRecord).where(
            TaskRecord.id == task_id,
            TaskRecord.user_id == user.id
        )
    )
    task = result.scalar_one_or_none()
    if not task:
        raise NotFoundError(task_id)
    return task


# --- Endpoints ---

@router.get("", response_model=List[Task])
async def list_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List tasks, newest first"""
    result = await db.execute(
        select(TaskRecord)
        .where(TaskRecord.user_id == current_user.id)
        .order_by(TaskRecord.created_at.desc())
    )
    return [_build_task_response(t) for t in result.scalars().all()]


@router.post("", response_model=Task, status_code=201)
async def create_task(
    data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a new task"""
    task = TaskRecord(
        user_id=current_user.id,
        title=validate_title(data.title),
        description=normalize_description(data.description),
        status=TaskStatus.PENDING.value,
        created_at=now_ms(),
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return _build_task_response(task)


@router.delete("")
async def clear_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete every task of the current user"""
    count = await db.execute(
        select(func.count(TaskRecord.id)).where(TaskRecord.user_id == current_user.id)
    )
    deleted = count.scalar() or 0
    await db.execute(delete(TaskRecord).where(TaskRecord.user_id == current_user.id))
    await db.commit()
    return {"success": True, "deleted": deleted}


@router.post("/import", response_model=List[Task])
async def import_tasks(
    items: List[TaskImportItem],
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Replace all of the current user's tasks with the given list"""
    ids = [i.id for i in items if i.id]
    if len(ids) != len(set(ids)):
        raise ValidationError("Duplicate task id in import")

    existing = await db.execute(select(TaskRecord).where(TaskRecord.user_id == current_user.id))
    for old in existing.scalars().all():
        await db.delete(old)
    await db.flush()

    # Ids owned by other accounts cannot be reused
    taken = set()
    if ids:
        result = await db.execute(select(TaskRecord.id).where(TaskRecord.id.in_(ids)))
        taken = set(result.scalars().all())

    records = []
    for item in items:
        record = TaskRecord(
            user_id=current_user.id,
            title=validate_title(item.title),
            description=normalize_description(item.description),
            status=(item.status or TaskStatus.PENDING).value,
            created_at=item.created_at or now_ms(),
        )
        if item.id and item.id not in taken:
            record.id = item.id
        db.add(record)
        records.append(record)

    await db.commit()
    return [_build_task_response(r) for r in records]


@router.get("/{task_id}", response_model=Task)
async def get_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _build_task_response(await _get_owned_task(db, task_id, current_user))


@router.put("/{task_id}", response_model=Task)
async def put_task(
    task_id: str,
    data: TaskPut,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create the task under this id, or replace title/description (and status if given)"""
    title = validate_title(data.title)
    description = normalize_description(data.description)

    result = await db.execute(select(TaskRecord).where(TaskRecord.id == task_id))
    task = result.scalar_one_or_none()
    if task is not None and task.user_id != current_user.id:
        raise ConflictError(f"Task id already in use: {task_id}")

    if task is None:
        task = TaskRecord(
            id=task_id,
            user_id=current_user.id,
            status=(data.status or TaskStatus.PENDING).value,
            created_at=data.created_at or now_ms(),
        )
        db.add(task)
    elif data.status is not None:
        task.status = data.status.value

    task.title = title
    task.description = description
    await db.commit()
    await db.refresh(task)
    return _build_task_response(task)


@router.patch("/{task_id}/toggle", response_model=Task)
async def toggle_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Flip PENDING <-> COMPLETED"""
    task = await _get_owned_task(db, task_id, current_user)
    task.status = (
        TaskStatus.PENDING.value
        if task.status == TaskStatus.COMPLETED.value
        else TaskStatus.COMPLETED.value
    )
    await db.commit()
    await db.refresh(task)
    return _build_task_response(task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a task; unknown ids are a 404"""
    task = await _get_owned_task(db, task_id, current_user)
    await db.delete(task)
    await db.commit()
    return {"success": True}
