"""
Embedded local document store backed by a SQLite file
"""
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from backend.database import Database
from backend.models.record import LocalBase, StoredRecord
from backend.storage.base import PersistenceAdapter, Record, record_key
from backend.utils.errors import PersistenceError
from backend.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentStore(PersistenceAdapter):
    """
    Stores each record as a JSON document in a single ``records`` table.

    Owns its Database handle unless one is passed in.
    """

    name = "document"

    def __init__(self, url: str = "sqlite:///./zero_task_local.db", database: Optional[Database] = None):
        self._owns_database = database is None
        self.database = database or Database(url, metadata=LocalBase.metadata)

    async def open(self) -> None:
        try:
            await self.database.connect()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not open local store: {e}") from e
        logger.debug(f"Local document store ready at {self.database.url}")

    async def close(self) -> None:
        if self._owns_database:
            await self.database.close()

    async def get_all(self, collection: str) -> List[Record]:
        self._check_collection(collection)
        try:
            async with self.database.session() as session:
                result = await session.execute(
                    select(StoredRecord).where(StoredRecord.collection == collection)
                )
                return [row.data for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read '{collection}': {e}") from e

    async def get(self, collection: str, key: str) -> Optional[Record]:
        self._check_collection(collection)
        try:
            async with self.database.session() as session:
                row = await session.get(StoredRecord, (collection, key))
                return row.data if row is not None else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read '{collection}/{key}': {e}") from e

    async def put(self, collection: str, record: Record) -> None:
        self._check_collection(collection)
        key = record_key(collection, record)
        try:
            async with self.database.session() as session:
                await session.merge(StoredRecord(collection=collection, key=key, data=dict(record)))
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to write '{collection}/{key}': {e}") from e

    async def delete(self, collection: str, key: str) -> None:
        self._check_collection(collection)
        try:
            async with self.database.session() as session:
                await session.execute(
                    delete(StoredRecord).where(
                        StoredRecord.collection == collection,
                        StoredRecord.key == key,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to delete '{collection}/{key}': {e}") from e

    async def clear(self, collection: str) -> None:
        self._check_collection(collection)
        try:
            async with self.database.session() as session:
                await session.execute(
                    delete(StoredRecord).where(StoredRecord.collection == collection)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to clear '{collection}': {e}") from e
