from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

from app.core.config import settings

import logging


Base = declarative_base()


logger = logging.getLogger(__name__)


def build_engine(url: str | None = None, *, echo: bool | None = None) -> AsyncEngine:
    """Create the async engine backing local storage (SQLite by default)."""
    return create_async_engine(
        url or settings.storage.url,
        echo=settings.storage.echo if echo is None else echo,
        pool_pre_ping=True,
    )


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create tables for every registered schema.

    The storage schema is a single key/value table, so there is no migration
    history to replay; ``create_all`` is idempotent.
    """
    # Import models so Base metadata is aware of them
    from app.core.db import schemas  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Storage tables ready on %s", engine.url.render_as_string(hide_password=True))
