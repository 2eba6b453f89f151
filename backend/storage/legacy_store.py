"""
Legacy flat key/value store.

Mirrors the browser storage layout used before the document store existed:
a single JSON object whose values are JSON-encoded strings.

    zero-task-data       JSON array of Task, newest first
    zero-task-audit-log  JSON array of AuditEntry, newest first
    zero-task-theme      "light" | "dark" (plain string, not JSON)
"""
import asyncio
import json
import os
from pathlib import Path
from typing import Dict, List, Optional

from backend.storage.base import LOGS, METADATA, TASKS, THEME, PersistenceAdapter, Record, record_key
from backend.utils.errors import PersistenceError

TASKS_KEY = "zero-task-data"
AUDIT_KEY = "zero-task-audit-log"
THEME_KEY = "zero-task-theme"

_ARRAY_KEYS = {TASKS: TASKS_KEY, LOGS: AUDIT_KEY}


class LegacyKeyValueStore(PersistenceAdapter):
    name = "legacy"

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def exists(self) -> bool:
        return self.path.exists()

    # ---- raw key/value access ----

    def _read_items(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                items = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Cannot read legacy store {self.path}: {e}") from e
        if not isinstance(items, dict):
            raise PersistenceError(f"Legacy store {self.path} is not a key/value object")
        return items

    def _write_items(self, items: Dict[str, str]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Cannot write legacy store {self.path}: {e}") from e

    async def get_item(self, key: str) -> Optional[str]:
        items = await asyncio.to_thread(self._read_items)
        return items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        def _set():
            items = self._read_items()
            items[key] = value
            self._write_items(items)
        await asyncio.to_thread(_set)

    async def remove_item(self, key: str) -> None:
        def _remove():
            items = self._read_items()
            if key in items:
                del items[key]
                self._write_items(items)
        await asyncio.to_thread(_remove)

    # ---- array collections ----

    async def _load_array(self, collection: str) -> List[Record]:
        raw = await self.get_item(_ARRAY_KEYS[collection])
        if raw is None:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt legacy '{collection}' data: {e}") from e
        if not isinstance(records, list):
            raise PersistenceError(f"Legacy '{collection}' data is not an array")
        return records

    async def _save_array(self, collection: str, records: List[Record]) -> None:
        await self.set_item(_ARRAY_KEYS[collection], json.dumps(records))

    @staticmethod
    def _metadata_key(key: str) -> str:
        return THEME_KEY if key == THEME else f"zero-task-{key}"

    async def get_all(self, collection: str) -> List[Record]:
        self._check_collection(collection)
        if collection == METADATA:
            items = await asyncio.to_thread(self._read_items)
            theme = items.get(THEME_KEY)
            return [{"key": THEME, "value": theme}] if theme is not None else []
        return await self._load_array(collection)

    async def get(self, collection: str, key: str) -> Optional[Record]:
        self._check_collection(collection)
        if collection == METADATA:
            raw = await self.get_item(self._metadata_key(key))
            if raw is None:
                return None
            if key == THEME:
                return {"key": key, "value": raw}
            try:
                return {"key": key, "value": json.loads(raw)}
            except json.JSONDecodeError as e:
                raise PersistenceError(f"Corrupt legacy metadata '{key}': {e}") from e
        for record in await self._load_array(collection):
            if str(record.get("id")) == key:
                return record
        return None

    async def put(self, collection: str, record: Record) -> None:
        self._check_collection(collection)
        key = record_key(collection, record)
        if collection == METADATA:
            value = record.get("value")
            raw = value if key == THEME else json.dumps(value)
            await self.set_item(self._metadata_key(key), raw)
            return
        records = await self._load_array(collection)
        for i, existing in enumerate(records):
            if str(existing.get("id")) == key:
                records[i] = dict(record)
                break
        else:
            records.insert(0, dict(record))
        await self._save_array(collection, records)

    async def delete(self, collection: str, key: str) -> None:
        self._check_collection(collection)
        if collection == METADATA:
            await self.remove_item(self._metadata_key(key))
            return
        records = await self._load_array(collection)
        await self._save_array(collection, [r for r in records if str(r.get("id")) != key])

    async def clear(self, collection: str) -> None:
        self._check_collection(collection)
        if collection == METADATA:
            await self.remove_item(THEME_KEY)
            return
        await self.remove_item(_ARRAY_KEYS[collection])
