"""
Task Store - the authoritative ordered task collection.

Every mutation is applied in memory first and then written to the backing
store. When the write fails the error is logged; with
``rollback_on_failure`` the previous in-memory state is restored and the
PersistenceError is raised to the caller, otherwise the in-memory change is
kept and the two states may diverge until the next load.
"""
from typing import Awaitable, Callable, List, Optional, Sequence

from backend.services.audit_recorder import AuditRecorder
from backend.services.entities import AuditAction, Task, TaskStatus
from backend.storage.base import TASKS, PersistenceAdapter
from backend.utils.errors import NotFoundError, PersistenceError, ValidationError
from backend.utils.helpers import new_id, now_ms
from backend.utils.logger import get_logger
from backend.utils.validators import normalize_description, validate_title

logger = get_logger(__name__)


class TaskStore:

    def __init__(
        self,
        adapter: PersistenceAdapter,
        audit: Optional[AuditRecorder] = None,
        user_id: Optional[str] = None,
        rollback_on_failure: bool = False,
    ):
        self.adapter = adapter
        self.audit = audit
        self.user_id = user_id
        self.rollback_on_failure = rollback_on_failure
        self._tasks: List[Task] = []

    # ---- internals ----

    def _index_of(self, task_id: str) -> int:
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        raise NotFoundError(task_id)

    async def _persist(self, snapshot: List[Task], write: Callable[[], Awaitable[None]]) -> bool:
        """Run *write*; on failure log and, if configured, restore *snapshot*"""
        try:
            await write()
            return True
        except PersistenceError as e:
            logger.error(f"Task persistence failed: {e}")
            if self.rollback_on_failure:
                self._tasks = snapshot
                raise
            return False

    async def _replace_records(self, tasks: Sequence[Task]) -> None:
        """Make the backing store hold exactly *tasks*: upsert, then drop the rest"""
        keep = {t.id for t in tasks}
        for task in tasks:
            await self.adapter.put(TASKS, task.to_record())
        for record in await self.adapter.get_all(TASKS):
            if record.get("id") not in keep:
                await self.adapter.delete(TASKS, record["id"])

    async def _restore_records(self, snapshot: List[Task]) -> None:
        try:
            await self._replace_records(snapshot)
        except PersistenceError as e:
            logger.error(f"Could not restore tasks after failed write: {e}")

    async def _record(self, action: AuditAction, details: str) -> None:
        if self.audit is not None:
            await self.audit.append(action, details, self.user_id)

    # ---- queries ----

    async def load(self) -> List[Task]:
        """Replace the in-memory collection with the backing store contents"""
        try:
            records = await self.adapter.get_all(TASKS)
        except PersistenceError as e:
            logger.error(f"Failed to load tasks: {e}")
            return self.list()

        tasks = []
        for record in records:
            try:
                tasks.append(Task.from_record(record))
            except ValueError as e:
                logger.warning(f"Skipping unreadable task {record.get('id')}: {e}")
        tasks.sort(key=lambda t: t.created_at, reverse=True)
        self._tasks = tasks
        logger.debug(f"Loaded {len(tasks)} tasks from {self.adapter.name} store")
        return self.list()

    def list(self) -> List[Task]:
        return list(self._tasks)

    def get(self, task_id: str) -> Task:
        return self._tasks[self._index_of(task_id)]

    def __len__(self) -> int:
        return len(self._tasks)

    # ---- mutations ----

    async def add(self, title: str, description: Optional[str] = "") -> Task:
        task = Task(
            id=new_id(),
            title=validate_title(title),
            description=normalize_description(description),
            status=TaskStatus.PENDING,
            created_at=now_ms(),
        )
        snapshot = self.list()
        self._tasks.insert(0, task)

        await self._persist(snapshot, lambda: self.adapter.put(TASKS, task.to_record()))
        await self._record(AuditAction.CREATE, f"Added task: {task.title}")
        return task

    async def toggle(self, task_id: str) -> Task:
        index = self._index_of(task_id)
        current = self._tasks[index]
        new_status = TaskStatus.PENDING if current.status == TaskStatus.COMPLETED else TaskStatus.COMPLETED
        updated = current.model_copy(update={"status": new_status})

        snapshot = self.list()
        self._tasks[index] = updated

        await self._persist(snapshot, lambda: self.adapter.put(TASKS, updated.to_record()))
        await self._record(AuditAction.TOGGLE, f"Toggled task: {updated.title} -> {new_status.value}")
        return updated

    async def update(self, task_id: str, title: str, description: Optional[str] = "") -> Task:
        index = self._index_of(task_id)
        updated = self._tasks[index].model_copy(update={
            "title": validate_title(title),
            "description": normalize_description(description),
        })

        snapshot = self.list()
        self._tasks[index] = updated

        await self._persist(snapshot, lambda: self.adapter.put(TASKS, updated.to_record()))
        await self._record(AuditAction.UPDATE, f"Updated task: {updated.title}")
        return updated

    async def remove(self, task_id: str) -> None:
        """Raises NotFoundError for an unknown id"""
        index = self._index_of(task_id)
        snapshot = self.list()
        task = self._tasks.pop(index)

        await self._persist(snapshot, lambda: self.adapter.delete(TASKS, task_id))
        await self._record(AuditAction.DELETE, f"Deleted task: {task.title}")

    async def reorder(self, new_sequence: Sequence[Task]) -> None:
        """
        Replace the in-memory order with a permutation of the current tasks.

        The order is session-local: backing stores keep no rank and a later
        load() returns tasks newest first again.
        """
        new_ids = [t.id for t in new_sequence]
        if len(new_ids) != len(set(new_ids)) or set(new_ids) != {t.id for t in self._tasks}:
            raise ValidationError("Reorder must be a permutation of the current tasks")

        by_id = {t.id: t for t in self._tasks}
        self._tasks = [by_id[task_id] for task_id in new_ids]
        await self._record(AuditAction.REORDER, "Reordered tasks in current session")

    async def import_all(self, tasks: Sequence[Task]) -> None:
        """Destructively replace the whole collection"""
        imported = []
        seen = set()
        for task in tasks:
            if task.id in seen:
                raise ValidationError(f"Duplicate task id in import: {task.id}")
            seen.add(task.id)
            imported.append(task.model_copy(update={"title": validate_title(task.title)}))

        snapshot = self.list()
        self._tasks = imported

        async def write():
            try:
                await self._replace_records(imported)
            except PersistenceError:
                if self.rollback_on_failure:
                    await self._restore_records(snapshot)
                raise

        await self._persist(snapshot, write)
        await self._record(AuditAction.IMPORT, f"Imported {len(imported)} tasks from backup")

    async def clear_all(self) -> None:
        snapshot = self.list()
        self._tasks = []

        await self._persist(snapshot, lambda: self.adapter.clear(TASKS))
        await self._record(AuditAction.CLEAR, "Cleared all tasks from system")
