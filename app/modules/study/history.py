"""Most-recent-first history of generations, written through to local storage."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from app.core.logging import get_logger
from app.core.storage import LocalStorage, StorageError
from app.modules.study.models.history import HistoryList, HistoryRecord

logger = get_logger(__name__)


class HistoryStore:
    def __init__(self, storage: LocalStorage, key: str) -> None:
        self.storage = storage
        self.key = key
        self._records: list[HistoryRecord] = []

    @property
    def records(self) -> list[HistoryRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def get(self, record_id: int) -> Optional[HistoryRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    async def load(self) -> list[HistoryRecord]:
        """Replace the in-memory list with what storage holds; bad data means empty."""
        try:
            raw = await self.storage.get_item(self.key)
        except StorageError as e:
            logger.warning("History unavailable, starting empty: %s", e)
            self._records = []
            return self.records
        if not raw:
            self._records = []
            return self.records
        try:
            self._records = HistoryList.validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding malformed history in '%s': %s", self.key, e)
            self._records = []
        return self.records

    async def append(self, record: HistoryRecord) -> None:
        self._records.insert(0, record)
        await self._save()

    async def clear(self) -> None:
        self._records = []
        try:
            await self.storage.remove_item(self.key)
        except StorageError as e:
            logger.warning("Failed to remove stored history: %s", e)

    async def _save(self) -> None:
        data = HistoryList.dump_json(self._records, exclude_none=True).decode("utf-8")
        try:
            await self.storage.set_item(self.key, data)
        except StorageError as e:
            # In-memory history stays usable for this session
            logger.warning("Failed to persist history: %s", e)
