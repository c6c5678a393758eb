import os

import pytest

os.environ.setdefault("MODE", "test")
os.environ.setdefault("REVIEW_FLIP_DELAY_MS", "0")

from app.core.db.base import build_engine, build_session_maker, init_models  # noqa: E402
from app.core.storage import LocalStorage  # noqa: E402
from app.modules.study.history import HistoryStore  # noqa: E402
from app.modules.study.pipeline import GenerationPipeline  # noqa: E402
from app.modules.study.state import StudySession  # noqa: E402
from tests.fixtures.fakes import (  # noqa: E402
    FakeImageGenerator,
    FakeTextGenerator,
    MemoryStorage,
)
from tests.fixtures.sample_data import FLASHCARDS_JSON  # noqa: E402

HISTORY_KEY = "test.history"
THEME_KEY = "test.theme"


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def history(storage):
    return HistoryStore(storage, HISTORY_KEY)


@pytest.fixture
def text_generator():
    return FakeTextGenerator(response=FLASHCARDS_JSON)


@pytest.fixture
def image_generator():
    return FakeImageGenerator()


@pytest.fixture
def pipeline(text_generator, image_generator, history):
    return GenerationPipeline(text_generator, image_generator, history)


@pytest.fixture
def study_session(pipeline, history, storage):
    return StudySession(pipeline, history, storage, theme_key=THEME_KEY)


@pytest.fixture
async def sqlite_storage(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'storage.db'}", echo=False)
    await init_models(engine)
    try:
        yield LocalStorage(build_session_maker(engine))
    finally:
        await engine.dispose()
