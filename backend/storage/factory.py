"""
Select the concrete backing store for a client session
"""
from typing import Optional

import httpx

from backend.config import Settings
from backend.storage.api_store import ApiStore
from backend.storage.base import PersistenceAdapter
from backend.storage.document_store import DocumentStore
from backend.storage.memory import MemoryStore

STORAGE_MODES = ("memory", "local", "remote")


def create_adapter(settings: Settings, client: Optional[httpx.AsyncClient] = None) -> PersistenceAdapter:
    """Build (but do not open) the adapter named by STORAGE_MODE"""
    mode = settings.STORAGE_MODE
    if mode == "memory":
        return MemoryStore()
    if mode == "local":
        return DocumentStore(settings.LOCAL_DATABASE_URL)
    if mode == "remote":
        return ApiStore(settings.API_BASE_URL, token=settings.API_TOKEN or None, client=client)
    raise ValueError(f"Unknown STORAGE_MODE '{mode}'. Must be one of: {STORAGE_MODES}")
