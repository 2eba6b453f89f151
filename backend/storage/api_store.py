"""
Remote store - persists through the Zero Task REST API
"""
from typing import List, Optional

import httpx

from backend.storage.base import LOGS, TASKS, PersistenceAdapter, Record, record_key
from backend.utils.errors import PersistenceError
from backend.utils.logger import get_logger

logger = get_logger(__name__)

_PATHS = {TASKS: "/api/tasks", LOGS: "/api/audit"}


class ApiStore(PersistenceAdapter):
    """
    Upserts go through ``PUT /api/tasks/{id}`` and ``POST /api/audit``.

    The server orders tasks by creation time; it keeps no rank, so a
    reordered sequence is not reflected here.
    """

    name = "remote"
    collections = (TASKS, LOGS)

    def __init__(
        self,
        base_url: str = "http://localhost:5001",
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url
        self.token = token
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def open(self) -> None:
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout)
        if self.token:
            self._client.headers["Authorization"] = f"Bearer {self.token}"

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if self._client is None:
            raise PersistenceError("Remote store is not open")
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise PersistenceError(
                f"{method} {path} failed with {e.response.status_code}: {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise PersistenceError(f"{method} {path} failed: {e}") from e

    async def get_all(self, collection: str) -> List[Record]:
        self._check_collection(collection)
        response = await self._request("GET", _PATHS[collection])
        return response.json()

    async def get(self, collection: str, key: str) -> Optional[Record]:
        self._check_collection(collection)
        for record in await self.get_all(collection):
            if str(record.get("id")) == key:
                return record
        return None

    async def put(self, collection: str, record: Record) -> None:
        self._check_collection(collection)
        key = record_key(collection, record)
        if collection == TASKS:
            await self._request("PUT", f"{_PATHS[TASKS]}/{key}", json=record)
        else:
            await self._request("POST", _PATHS[LOGS], json=record)

    async def delete(self, collection: str, key: str) -> None:
        self._check_collection(collection)
        try:
            await self._request("DELETE", f"{_PATHS[collection]}/{key}")
        except PersistenceError as e:
            if isinstance(e.__cause__, httpx.HTTPStatusError) and e.__cause__.response.status_code == 404:
                logger.debug(f"Remote {collection}/{key} already gone")
                return
            raise

    async def clear(self, collection: str) -> None:
        self._check_collection(collection)
        await self._request("DELETE", _PATHS[collection])
