"""Durable local key/value storage.

A tiny string-to-string store with whole-value overwrite semantics, backed by
the SQLAlchemy engine configured under ``settings.storage``. Callers own the
serialization of their values.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.db.schemas.storage import StorageEntry


class StorageError(Exception):
    """Durable storage could not be read or written."""


class LocalStorage:
    def __init__(self, session_maker: async_sessionmaker) -> None:
        self._session_maker = session_maker

    async def get_item(self, key: str) -> Optional[str]:
        try:
            async with self._session_maker() as session:
                entry = await session.get(StorageEntry, key)
                return entry.value if entry else None
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read '{key}': {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        try:
            async with self._session_maker() as session:
                entry = await session.get(StorageEntry, key)
                if entry is None:
                    session.add(StorageEntry(key=key, value=value))
                else:
                    entry.value = value
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to write '{key}': {e}") from e

    async def remove_item(self, key: str) -> None:
        try:
            async with self._session_maker() as session:
                await session.execute(delete(StorageEntry).where(StorageEntry.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e
