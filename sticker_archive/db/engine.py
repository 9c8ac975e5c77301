"""Async engine and session factories for the metadata store.

Engines are cached per database URL, so the HTTP service and the import CLI
each hold a single connection pool per database:

    engine = get_engine(settings.database_url)
    await init_db(engine)

    Session = get_async_session(settings.database_url)
    async with Session() as session:
        ...
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sticker_archive.db.models import Base

_engines: dict[str, AsyncEngine] = {}


def _resolve_url(database_url: str | None) -> str:
    if database_url is not None:
        return database_url
    from sticker_archive.config.settings import get_settings

    return get_settings().database_url


def get_engine(database_url: str | None = None) -> AsyncEngine:
    """Return the engine for a URL, creating it on first use.

    Args:
        database_url: Connection URL. Defaults to the configured database_url.
    """
    url = _resolve_url(database_url)
    engine = _engines.get(url)
    if engine is None:
        # Pooled connections can be dropped by PostgreSQL between uploads
        engine = create_async_engine(url, pool_pre_ping=True)
        _engines[url] = engine
    return engine


@lru_cache(maxsize=8)
def get_async_session(
    database_url: str | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to get_engine(database_url).

    Objects stay loaded after commit; the pipeline commits once per sticker.
    """
    return async_sessionmaker(bind=get_engine(database_url), expire_on_commit=False)


async def init_db(engine: AsyncEngine) -> None:
    """Create the series, stickers, tags and sticker_tags tables if missing."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engines() -> None:
    """Close every pooled connection and forget cached engines and factories."""
    engines = list(_engines.values())
    _engines.clear()
    get_async_session.cache_clear()
    for engine in engines:
        await engine.dispose()
