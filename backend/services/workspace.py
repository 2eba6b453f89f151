"""
Client session wiring: backing store + task store + audit recorder.

A TaskWorkspace owns its adapter for the duration of ``open()``..``close()``;
nothing here is a module-level singleton.
"""
from typing import Optional

import httpx

from backend.config import Settings
from backend.services.audit_recorder import AuditRecorder
from backend.services.passcode_auth import PasscodeAuth
from backend.services.preferences import ThemePreference
from backend.services.task_store import TaskStore
from backend.storage.base import METADATA, PersistenceAdapter
from backend.storage.factory import create_adapter
from backend.storage.legacy_store import LegacyKeyValueStore
from backend.storage.migration import MigrationResult, migrate_once
from backend.utils.logger import get_logger

logger = get_logger(__name__)


class TaskWorkspace:

    def __init__(
        self,
        adapter: PersistenceAdapter,
        legacy: Optional[LegacyKeyValueStore] = None,
        audit_limit: int = 50,
        user_id: Optional[str] = None,
        rollback_on_failure: bool = False,
    ):
        self.adapter = adapter
        self.legacy = legacy
        self.audit = AuditRecorder(adapter, limit=audit_limit)
        self.tasks = TaskStore(
            adapter,
            audit=self.audit,
            user_id=user_id,
            rollback_on_failure=rollback_on_failure,
        )
        # Passcode auth and preferences need a metadata collection (local deployments only)
        has_metadata = METADATA in adapter.collections
        self.auth: Optional[PasscodeAuth] = PasscodeAuth(adapter, audit=self.audit) if has_metadata else None
        self.theme: Optional[ThemePreference] = ThemePreference(adapter) if has_metadata else None
        self.migration: Optional[MigrationResult] = None
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def open(self) -> "TaskWorkspace":
        await self.adapter.open()
        self._is_open = True
        try:
            if self.legacy is not None and METADATA in self.adapter.collections:
                self.migration = await migrate_once(self.legacy, self.adapter)
            await self.tasks.load()
            await self.audit.load()
        except Exception:
            await self.close()
            raise
        logger.info(
            f"Workspace open on {self.adapter.name} store: "
            f"{len(self.tasks)} tasks, {len(self.audit)} audit entries"
        )
        return self

    async def close(self) -> None:
        if self._is_open:
            await self.adapter.close()
            self._is_open = False

    async def __aenter__(self) -> "TaskWorkspace":
        return await self.open()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def open_workspace(settings: Settings, client: Optional[httpx.AsyncClient] = None) -> TaskWorkspace:
    """
    Build a workspace for the configured STORAGE_MODE.

    Use as ``async with open_workspace(settings) as ws: ...``.
    """
    adapter = create_adapter(settings, client=client)
    legacy = None
    if settings.STORAGE_MODE == "local":
        legacy = LegacyKeyValueStore(settings.LEGACY_STORE_PATH)
    return TaskWorkspace(
        adapter,
        legacy=legacy,
        audit_limit=settings.AUDIT_LOG_LIMIT,
        rollback_on_failure=settings.ROLLBACK_ON_PERSISTENCE_FAILURE,
    )
