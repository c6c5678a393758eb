from datetime import datetime, timezone

from app.modules.study.history import HistoryStore
from app.modules.study.models.history import HistoryRecord
from app.modules.study.models.items import Flashcard, GenerationMode, InputKind, MCQItem
from tests.conftest import HISTORY_KEY
from tests.fixtures.fakes import MemoryStorage


def _record(record_id: int, mode=GenerationMode.FLASHCARDS, **kwargs) -> HistoryRecord:
    if mode == GenerationMode.MCQS:
        items = [
            MCQItem(
                question="Which gas?",
                options=["O2", "CO2", "N2", "He"],
                correct_answer="CO2",
                icon="data:image/png;base64,aWNvbg==",
            )
        ]
    else:
        items = [Flashcard(question="Define osmosis", answer="Diffusion of water")]
    defaults = dict(
        id=record_id,
        timestamp=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        input_kind=InputKind.TEXT,
        mode=mode,
        input_summary="Osmosis notes",
        items=items,
        theme="dark",
    )
    defaults.update(kwargs)
    return HistoryRecord(**defaults)


async def test_append_is_most_recent_first(history):
    await history.append(_record(1))
    await history.append(_record(2))
    assert [r.id for r in history.records] == [2, 1]


async def test_round_trip_preserves_every_field(storage):
    store = HistoryStore(storage, HISTORY_KEY)
    await store.append(_record(1))
    await store.append(_record(2, mode=GenerationMode.MCQS, theme="sunset"))
    before = store.records

    reloaded = HistoryStore(storage, HISTORY_KEY)
    await reloaded.load()

    assert reloaded.records == before
    assert isinstance(reloaded.records[0].items[0], MCQItem)
    assert isinstance(reloaded.records[1].items[0], Flashcard)
    assert reloaded.records[1].items[0].icon is None


async def test_stored_json_omits_missing_icons(storage):
    store = HistoryStore(storage, HISTORY_KEY)
    await store.append(_record(1))
    assert '"icon"' not in storage.data[HISTORY_KEY]


async def test_clear_removes_entry(storage):
    store = HistoryStore(storage, HISTORY_KEY)
    await store.append(_record(1))
    await store.clear()
    assert store.records == []
    assert HISTORY_KEY not in storage.data


async def test_missing_or_malformed_storage_is_empty():
    for data in ({}, {HISTORY_KEY: "not json"}, {HISTORY_KEY: '[{"id": "x"}]'}):
        store = HistoryStore(MemoryStorage(data), HISTORY_KEY)
        assert await store.load() == []


async def test_unreadable_storage_is_empty():
    store = HistoryStore(MemoryStorage(fail_reads=True), HISTORY_KEY)
    assert await store.load() == []


async def test_failed_write_keeps_memory_copy():
    store = HistoryStore(MemoryStorage(fail_writes=True), HISTORY_KEY)
    await store.append(_record(5))
    assert [r.id for r in store.records] == [5]


async def test_get_finds_record(history):
    await history.append(_record(9))
    assert history.get(9).id == 9
    assert history.get(10) is None


def test_preview_truncates_long_text():
    long = "x" * 100
    assert _record(1, input_summary=long).preview == "x" * 80 + "..."
    assert _record(1, input_kind=InputKind.IMAGE).preview == "Image input"


async def test_round_trip_through_sqlite(sqlite_storage):
    store = HistoryStore(sqlite_storage, HISTORY_KEY)
    await store.append(_record(1))
    await store.append(_record(2, mode=GenerationMode.MCQS))

    reloaded = HistoryStore(sqlite_storage, HISTORY_KEY)
    assert await reloaded.load() == store.records
